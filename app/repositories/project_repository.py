from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath


class ProjectRepository:
    collection = "projects"

    def __init__(self, db):
        self._db = db

    def ref(self, project_id: str):
        return self._db.collection(self.collection).document(project_id)

    def new_id(self) -> str:
        # auto-id without writing anything
        return self._db.collection(self.collection).document().id

    def create(self, project_id: str, data: Dict[str, Any]) -> None:
        self.ref(project_id).set(data)

    def get(self, project_id: str) -> Optional[Dict[str, Any]]:
        snap = self.ref(project_id).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def list(self, member_uid: Optional[str] = None) -> List[Tuple[str, Dict[str, Any]]]:
        """
        All projects, or only those whose `members` contains member_uid,
        newest first. Returns (doc_id, data) pairs.
        """
        q = self._db.collection(self.collection)
        if member_uid is not None:
            q = q.where(filter=FieldFilter("members", "array_contains", member_uid))
        q = q.order_by("createdAt", direction=firestore.Query.DESCENDING)

        return [(d.id, d.to_dict() or {}) for d in q.stream()]

    def update(self, project_id: str, data: Dict[str, Any]) -> None:
        # keys are top-level field names; quote them so update() never reads a dot as nesting
        self.ref(project_id).update({FieldPath(k).to_api_repr(): v for k, v in data.items()})

    def delete(self, project_id: str) -> None:
        self.ref(project_id).delete()
