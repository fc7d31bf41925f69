from __future__ import annotations

from typing import Any, Dict, Optional


class UserRepository:
    collection = "users"

    def __init__(self, db):
        self._db = db

    def ref(self, uid: str):
        return self._db.collection(self.collection).document(uid)

    def get(self, uid: str) -> Optional[Dict[str, Any]]:
        snap = self.ref(uid).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def merge(self, uid: str, data: Dict[str, Any]) -> None:
        self.ref(uid).set(data, merge=True)
