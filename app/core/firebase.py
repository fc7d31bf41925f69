# app/core/firebase.py
import json
import logging
from pathlib import Path

import firebase_admin
from firebase_admin import credentials, auth as fb_auth, firestore
from app.config import Settings

logger = logging.getLogger(__name__)


def _credentials(settings: Settings):
    # 1) service account JSON from env (Render / Cloud Run)
    if settings.FIREBASE_SERVICE_ACCOUNT_JSON:
        try:
            sa_info = json.loads(settings.FIREBASE_SERVICE_ACCOUNT_JSON)
        except json.JSONDecodeError as e:
            raise RuntimeError(
                "FIREBASE_SERVICE_ACCOUNT_JSON is not valid JSON"
            ) from e
        return credentials.Certificate(sa_info)

    # 2) local key file (dev)
    sa_path = Path(settings.GOOGLE_APPLICATION_CREDENTIALS)
    if sa_path.exists():
        return credentials.Certificate(str(sa_path))

    # 3) Application Default Credentials (GCP runtimes, emulator)
    logger.info("No service account key at %s, using application default credentials", sa_path)
    return credentials.ApplicationDefault()


def init_firebase(settings: Settings):
    """
    Initialize the default Firebase app once and return (firestore client, auth module).
    Called from the FastAPI lifespan, never at import time.
    """
    if not firebase_admin._apps:
        options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
        firebase_admin.initialize_app(_credentials(settings), options)
        logger.info("Firebase app initialized (project=%s)", settings.FIREBASE_PROJECT_ID or "default")

    return firestore.client(), fb_auth
