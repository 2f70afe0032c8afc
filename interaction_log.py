"""
Interaction log - best-effort record of every query and result
Writes to Firebase Firestore when credentials are configured, otherwise to a local JSON-lines file
"""
import json
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import BaseModel

from config import (
    FIREBASE_CREDENTIALS_PATH, FIREBASE_CREDENTIALS_JSON, LOGS_FILE, LOG_WORKERS,
    SESSION_ID, SESSION_LANGUAGE,
)

logger = logging.getLogger(__name__)

SCHEME_QUERIES = "scheme_queries"
SCHEME_QUERY_FAILURES = "scheme_query_failures"
DISEASE_DIAGNOSIS_LOGS = "disease_diagnosis_logs"
PRICE_QUERIES = "price_queries"
AGENT_INTERACTIONS = "agent_interactions"
AGENT_FAILURES = "agent_failures"


def _to_plain(value: Any) -> Any:
    """Convert models and exceptions into JSON-friendly values"""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, BaseException):
        return {"type": type(value).__name__, "message": str(value)}
    if isinstance(value, dict):
        return {key: _to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    return value


class InteractionLog:
    """Base sink; subclasses implement write()"""

    def write(self, collection: str, payload: Dict[str, Any], language: Optional[str] = None):
        raise NotImplementedError

    def record(self, query: str, result: Any):
        """Record a scheme query and its result"""
        self.write(SCHEME_QUERIES, {"query": query, "result": _to_plain(result)})

    def record_failure(self, query: str, error: Any):
        """Record a scheme query that ended in the error result"""
        self.write(SCHEME_QUERY_FAILURES, {"query": query, "error": _to_plain(error)})

    def close(self):
        pass


def _initialize_firebase():
    """Initialize Firebase Admin SDK"""
    try:
        firebase_admin.get_app()
        logger.info("Firebase already initialized")
        return firestore.client()
    except ValueError:
        # Firebase not initialized yet
        pass

    if FIREBASE_CREDENTIALS_PATH and os.path.exists(FIREBASE_CREDENTIALS_PATH):
        cred = credentials.Certificate(FIREBASE_CREDENTIALS_PATH)
        firebase_admin.initialize_app(cred)
        logger.info(f"Firebase initialized with credentials from {FIREBASE_CREDENTIALS_PATH}")
    elif FIREBASE_CREDENTIALS_JSON:
        cred = credentials.Certificate(json.loads(FIREBASE_CREDENTIALS_JSON))
        firebase_admin.initialize_app(cred)
        logger.info("Firebase initialized with credentials from environment variable")
    else:
        try:
            firebase_admin.initialize_app()
            logger.info("Firebase initialized with default credentials")
        except Exception as e:
            logger.error(f"Failed to initialize Firebase: {e}")
            raise RuntimeError(
                "Firebase initialization failed. Please set FIREBASE_CREDENTIALS_PATH "
                "or FIREBASE_CREDENTIALS_JSON environment variable, or use default credentials."
            ) from e

    return firestore.client()


class FirestoreInteractionLog(InteractionLog):
    """Interaction log stored in Firebase Firestore, one collection per flow"""

    def __init__(self, db=None):
        self.db = db if db is not None else _initialize_firebase()
        logger.info("FirestoreInteractionLog initialized")

    def write(self, collection: str, payload: Dict[str, Any], language: Optional[str] = None):
        document = {
            **_to_plain(payload),
            "sessionId": SESSION_ID,
            "language": language or SESSION_LANGUAGE,
            "timestamp": firestore.SERVER_TIMESTAMP,
        }
        self.db.collection(collection).add(document)


class JsonFileInteractionLog(InteractionLog):
    """Interaction log appended to a local JSON-lines file"""

    def __init__(self, path: str = LOGS_FILE):
        self.path = path
        self._lock = threading.Lock()

    def write(self, collection: str, payload: Dict[str, Any], language: Optional[str] = None):
        entry = {
            "collection": collection,
            **_to_plain(payload),
            "sessionId": SESSION_ID,
            "language": language or SESSION_LANGUAGE,
            "timestamp": datetime.now().isoformat(),
        }
        line = json.dumps(entry, ensure_ascii=False)
        with self._lock:
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(line + "\n")


class BackgroundInteractionLog(InteractionLog):
    """
    Fire-and-forget wrapper: writes are handed to a thread pool and never
    block the caller. Failures of the wrapped sink are logged and dropped.
    """

    def __init__(self, sink: InteractionLog, max_workers: int = LOG_WORKERS):
        self.sink = sink
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="interaction-log")

    def write(self, collection: str, payload: Dict[str, Any], language: Optional[str] = None) -> Optional[Future]:
        try:
            return self._executor.submit(self._safe_write, collection, payload, language)
        except RuntimeError as e:
            # Executor already shut down
            logger.error(f"Interaction log unavailable, dropping {collection} entry: {e}")
            return None

    def _safe_write(self, collection: str, payload: Dict[str, Any], language: Optional[str]):
        try:
            self.sink.write(collection, payload, language=language)
        except Exception as e:
            logger.error(f"Error logging {collection} entry: {e}")

    def close(self):
        self._executor.shutdown(wait=True)
        self.sink.close()


def create_interaction_log() -> InteractionLog:
    """Pick the sink from configuration and wrap it for background writes"""
    if FIREBASE_CREDENTIALS_PATH or FIREBASE_CREDENTIALS_JSON:
        try:
            return BackgroundInteractionLog(FirestoreInteractionLog())
        except Exception as e:
            logger.error(f"Failed to initialize Firestore interaction log, using {LOGS_FILE}: {e}")
    return BackgroundInteractionLog(JsonFileInteractionLog(LOGS_FILE))
