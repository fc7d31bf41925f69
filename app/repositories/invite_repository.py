from __future__ import annotations

from typing import Any, Dict, Optional

from firebase_admin import firestore

from app.repositories.user_repository import UserRepository


class InviteRepository:
    """
    invites/{inviteCode}

    The code is the document key, so a code maps to at most one invite and
    acceptance can compare-and-swap the status inside a transaction.
    """

    collection = "invites"

    def __init__(self, db, users: UserRepository):
        self._db = db
        self._users = users

    def ref(self, code: str):
        return self._db.collection(self.collection).document(code)

    def create(self, code: str, data: Dict[str, Any]) -> None:
        # create() fails with AlreadyExists if the code is taken
        self.ref(code).create(data)

    def get(self, code: str) -> Optional[Dict[str, Any]]:
        snap = self.ref(code).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def accept(
        self,
        code: str,
        invite_update: Dict[str, Any],
        user_uid: str,
        user_data: Dict[str, Any],
        user_defaults: Dict[str, Any],
    ) -> bool:
        """
        Atomically flip a pending invite to accepted and merge-write the user.

        `user_defaults` are only written when the user document lacks them.
        Returns False (and writes nothing) if the invite is gone or no longer pending.
        """
        invite_ref = self.ref(code)
        user_ref = self._users.ref(user_uid)
        transaction = self._db.transaction()

        @firestore.transactional
        def _accept(tx) -> bool:
            # all reads before any write
            invite_snap = invite_ref.get(transaction=tx)
            user_snap = user_ref.get(transaction=tx)

            if not invite_snap.exists:
                return False
            if (invite_snap.to_dict() or {}).get("status") != "pending":
                return False

            existing = user_snap.to_dict() or {}
            payload = dict(user_data)
            for key, value in user_defaults.items():
                if key not in existing:
                    payload[key] = value

            tx.update(invite_ref, invite_update)
            tx.set(user_ref, payload, merge=True)
            return True

        return _accept(transaction)
