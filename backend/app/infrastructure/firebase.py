"""Firebase Initializer: resolves the service-account credential and opens the store handle.

Invariants:
    - Production with FIREBASE_SERVICE_ACCOUNT set -> the JSON blob is the credential
    - Anything else -> the local bundle at settings.service_account_path
    - Every failure surfaces as FatalInitializationError; nothing here exits the process
    - One Firebase app and one async Firestore client per process

Design Decisions:
    - firestore_async client: store calls suspend on the event loop instead of
      occupying the thread pool
"""

import json
import logging

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.auth.exceptions import GoogleAuthError

from app.config import Settings
from app.core.errors import FatalInitializationError

logger = logging.getLogger(__name__)


def load_credential(settings: Settings) -> credentials.Certificate:
    """Select and parse the service-account credential for the current mode."""
    if settings.is_production and settings.firebase_service_account:
        try:
            source = json.loads(settings.firebase_service_account)
        except json.JSONDecodeError as exc:
            raise FatalInitializationError(
                "credentials", f"FIREBASE_SERVICE_ACCOUNT is not valid JSON: {exc}",
            ) from exc
        origin = "FIREBASE_SERVICE_ACCOUNT"
    else:
        path = settings.service_account_path
        if not path.is_file():
            raise FatalInitializationError(
                "credentials", f"Service account file not found: {path}",
            )
        source = str(path)
        origin = str(path)

    try:
        return credentials.Certificate(source)
    except (ValueError, OSError) as exc:
        raise FatalInitializationError(
            "credentials", f"Invalid service account credential from {origin}: {exc}",
        ) from exc


async def initialize_store(settings: Settings):
    """Initialize Firebase Admin and return the shared async Firestore client."""
    credential = load_credential(settings)
    try:
        firebase_app = firebase_admin.initialize_app(credential)
        client = firestore_async.client(firebase_app)
    except (ValueError, GoogleAuthError) as exc:
        raise FatalInitializationError(
            "store", f"Firestore client could not be created: {exc}",
        ) from exc

    logger.info(
        "Firebase Admin initialized successfully",
        extra={"project_id": getattr(credential, "project_id", None)},
    )
    return client
