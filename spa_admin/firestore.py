"""
Firestore client used by every collection accessor.

The client is built lazily with Application Default Credentials, so the same
code runs locally (gcloud / GOOGLE_APPLICATION_CREDENTIALS) and on Cloud Run.
"""

import logging
from typing import Optional

from google.cloud import firestore

from .config import FIREBASE_PROJECT_ID, FIRESTORE_DATABASE

logger = logging.getLogger(__name__)

firestore_client: Optional[firestore.AsyncClient] = None


def get_firestore() -> firestore.AsyncClient:
    """Get or create the shared async Firestore client"""
    global firestore_client

    if firestore_client is None:
        logger.info(f"🔄 Initializing Firestore client (project={FIREBASE_PROJECT_ID or 'ADC default'})")
        try:
            firestore_client = firestore.AsyncClient(
                project=FIREBASE_PROJECT_ID, database=FIRESTORE_DATABASE
            )
        except Exception as e:
            logger.error(f"❌ Failed to create Firestore client: {e}")
            raise

    return firestore_client
