"""
Firebase access layer for CommunityWatch
Firestore document operations and Firebase Authentication flows.

Document and admin auth calls go through the firebase-admin SDK. Password
sign-in and verification e-mails are client-side flows the admin SDK does not
offer, so those use the Firebase Auth REST API with the project's web API key.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from dataclasses import dataclass

import httpx
import firebase_admin
from firebase_admin import auth, credentials, firestore
from google.cloud.firestore_v1 import ArrayRemove, ArrayUnion, FieldFilter

from communitywatch.core.config import settings
from communitywatch.core.constants import FIREBASE_AUTH_REST_URL, FIRESTORE_IN_QUERY_LIMIT
from communitywatch.core.date_utils import date_joined

logger = logging.getLogger(__name__)

# (field, operator, value)
QueryFilter = Tuple[str, str, Any]


class FirebaseServiceError(Exception):
    """A Firebase call failed; the message names the operation and cause."""


class DocumentNotFoundError(FirebaseServiceError):
    """Requested Firestore document does not exist."""


class AuthenticationError(FirebaseServiceError):
    """Sign-in, sign-up or token operation was rejected."""


@dataclass
class AuthSession:
    """Result of a password sign-in."""
    uid: str
    email: str
    id_token: str
    refresh_token: str = ""
    expires_in: int = 3600

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "id_token": self.id_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
        }


def _chunks(values: Sequence[Any], size: int) -> Iterable[List[Any]]:
    for start in range(0, len(values), size):
        yield list(values[start:start + size])


class FirebaseService:
    """
    Thin wrapper over Firestore and Firebase Authentication.

    Every public method either succeeds or raises FirebaseServiceError with a
    message of the form ``"<Operation> Error: <cause>"``.
    """

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        project_id: Optional[str] = None,
        web_api_key: Optional[str] = None,
        db: Optional[Any] = None,
        auth_client: Optional[Any] = None,
        http_client: Optional[httpx.Client] = None,
        users_collection: Optional[str] = None,
    ):
        """
        Initialize the service.

        Args:
            credentials_path: Path to the service account JSON
            project_id: Firebase project ID
            web_api_key: Web API key for the Auth REST endpoints
            db: Firestore client to use instead of the default app's
            auth_client: Module or object exposing the firebase_admin.auth API
            http_client: HTTP client for the Auth REST endpoints
            users_collection: Collection holding user profiles
        """
        self.credentials_path = credentials_path or settings.firebase_credentials_path
        self.project_id = project_id or settings.firebase_project_id
        self.web_api_key = web_api_key or settings.firebase_web_api_key
        self.users_collection = users_collection or settings.users_collection

        self._db = db
        self._auth = auth_client
        self._http = http_client
        self._app = None

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def _initialize_firebase(self) -> None:
        """Initialize the Firebase Admin SDK app once per process."""
        try:
            self._app = firebase_admin.get_app()
            return
        except ValueError:
            pass

        try:
            options = {"projectId": self.project_id} if self.project_id else None
            if self.credentials_path:
                cred = credentials.Certificate(self.credentials_path)
            else:
                cred = credentials.ApplicationDefault()
            self._app = firebase_admin.initialize_app(cred, options)
            logger.info("Firebase app initialized")
        except (ValueError, OSError) as e:
            logger.error(f"Failed to initialize Firebase: {e}")
            raise FirebaseServiceError(f"Initialize Error: {e}") from e

    @property
    def db(self) -> Any:
        """Firestore client."""
        if self._db is None:
            self._initialize_firebase()
            self._db = firestore.client(self._app)
        return self._db

    @property
    def auth(self) -> Any:
        """firebase_admin.auth API."""
        if self._auth is None:
            self._initialize_firebase()
            self._auth = auth
        return self._auth

    def _get_http(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(timeout=15.0)
        return self._http

    def close(self) -> None:
        if self._http is not None:
            self._http.close()

    # ------------------------------------------------------------------
    # Firestore
    # ------------------------------------------------------------------

    def fetch_document(self, collection: str, doc_id: str) -> Dict[str, Any]:
        """
        Fetch one document.

        Raises:
            DocumentNotFoundError: if the document does not exist
            FirebaseServiceError: on any other failure
        """
        try:
            snapshot = self.db.collection(collection).document(doc_id).get()
        except Exception as e:
            logger.error(f"FetchDocument Error: {e}")
            raise FirebaseServiceError(f"FetchDocument Error: {e}") from e

        if not snapshot.exists:
            raise DocumentNotFoundError("FetchDocument Error: Document does not exist.")
        return snapshot.to_dict()

    def query_documents(
        self,
        collection: str,
        filters: Sequence[QueryFilter],
    ) -> List[Dict[str, Any]]:
        """
        Run a query built from (field, op, value) filters.

        Membership ("in") filters longer than Firestore allows are split into
        several queries and the results concatenated. Each returned dict has
        the document id under ``"id"``.
        """
        membership = [f for f in filters if f[1] == "in"]
        if len(membership) > 1:
            raise FirebaseServiceError("QueryDocuments Error: only one 'in' filter is supported")

        others = [f for f in filters if f[1] != "in"]
        if membership:
            field, _, values = membership[0]
            values = list(values)
            if not values:
                return []
            batches = [others + [(field, "in", chunk)] for chunk in _chunks(values, FIRESTORE_IN_QUERY_LIMIT)]
        else:
            batches = [others]

        documents: List[Dict[str, Any]] = []
        try:
            for batch in batches:
                query = self.db.collection(collection)
                for field, op, value in batch:
                    query = query.where(filter=FieldFilter(field, op, value))
                for doc in query.stream():
                    documents.append({"id": doc.id, **doc.to_dict()})
        except Exception as e:
            logger.error(f"QueryDocuments Error: {e}")
            raise FirebaseServiceError(f"QueryDocuments Error: {e}") from e

        if not documents:
            logger.info(f"No matching documents found in {collection}")
        return documents

    def fetch_documents_by_date(self, collection: str, date: str) -> List[Dict[str, Any]]:
        """All documents whose ``date`` equals the given day key."""
        return self.query_documents(collection, [("date", "==", date)])

    def send_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document at a known id."""
        try:
            self.db.collection(collection).document(doc_id).set(data)
            logger.debug(f"Document written: {collection}/{doc_id}")
        except Exception as e:
            logger.error(f"SendDocument Error: {e}")
            raise FirebaseServiceError(f"SendDocument Error: {e}") from e

    def create_document(self, collection: str, data: Dict[str, Any]) -> str:
        """Add a document with a generated id and return that id."""
        try:
            _, ref = self.db.collection(collection).add(data)
        except Exception as e:
            logger.error(f"CreateDocument Error: {e}")
            raise FirebaseServiceError(f"CreateDocument Error: {e}") from e

        logger.debug(f"Document created: {collection}/{ref.id}")
        return ref.id

    def update_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Update fields on an existing document."""
        try:
            self.db.collection(collection).document(doc_id).update(data)
            logger.debug(f"Document updated: {collection}/{doc_id}")
        except Exception as e:
            logger.error(f"UpdateDocument Error: {e}")
            raise FirebaseServiceError(f"UpdateDocument Error: {e}") from e

    def delete_document(self, collection: str, doc_id: str) -> None:
        try:
            self.db.collection(collection).document(doc_id).delete()
            logger.debug(f"Document deleted: {collection}/{doc_id}")
        except Exception as e:
            logger.error(f"DeleteDocument Error: {e}")
            raise FirebaseServiceError(f"DeleteDocument Error: {e}") from e

    def array_union(self, collection: str, doc_id: str, field: str, values: Sequence[Any]) -> None:
        """Add values to an array field, skipping ones already present."""
        self.update_document(collection, doc_id, {field: ArrayUnion(list(values))})

    def array_remove(self, collection: str, doc_id: str, field: str, values: Sequence[Any]) -> None:
        """Remove every occurrence of the values from an array field."""
        self.update_document(collection, doc_id, {field: ArrayRemove(list(values))})

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def _auth_rest(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST to the Firebase Auth REST API and return the JSON body."""
        if not self.web_api_key:
            raise AuthenticationError("Auth Error: FIREBASE_WEB_API_KEY not configured")

        response = self._get_http().post(
            f"{FIREBASE_AUTH_REST_URL}/accounts:{endpoint}",
            params={"key": self.web_api_key},
            json=payload,
        )
        if response.status_code != 200:
            try:
                message = response.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = response.text or f"HTTP {response.status_code}"
            raise AuthenticationError(message)
        return response.json()

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign a user in with e-mail and password."""
        try:
            data = self._auth_rest(
                "signInWithPassword",
                {"email": email, "password": password, "returnSecureToken": True},
            )
        except httpx.HTTPError as e:
            logger.error(f"SignIn Error: {e}")
            raise AuthenticationError(f"SignIn Error: {e}") from e
        except AuthenticationError as e:
            logger.error(f"SignIn Error: {e}")
            raise AuthenticationError(f"SignIn Error: {e}") from e

        return AuthSession(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken", ""),
            expires_in=int(data.get("expiresIn", 3600)),
        )

    def sign_up(self, user: Dict[str, Any], password: str) -> Dict[str, Any]:
        """
        Create an auth account and its profile document.

        The profile is the given user fields plus ``id``, ``dateJoined`` and
        zeroed counters; it never contains the password. If writing the
        profile fails, the new auth account is deleted again.

        Returns:
            The stored profile
        """
        profile = {k: v for k, v in user.items() if k != "password"}
        display_name = " ".join(
            part for part in (profile.get("firstName"), profile.get("lastName")) if part
        )

        try:
            record = self.auth.create_user(
                email=profile["email"],
                password=password,
                display_name=display_name or None,
            )
        except Exception as e:
            logger.error(f"SignUp Error: {e}")
            raise AuthenticationError(f"SignUp Error: {e}") from e

        uid = record.uid
        profile.update({
            "id": uid,
            "dateJoined": date_joined(),
        })
        profile.setdefault("trustPoints", 0)
        profile.setdefault("verified", False)
        profile.setdefault("locations", [])

        try:
            self.send_document(self.users_collection, uid, profile)
        except FirebaseServiceError as e:
            logger.error(f"SignUp Error: profile write failed for {uid}, rolling back account")
            try:
                self.auth.delete_user(uid)
            except Exception as cleanup_error:
                logger.error(f"SignUp Error: rollback failed for {uid}: {cleanup_error}")
            raise FirebaseServiceError(f"SignUp Error: {e}") from e

        logger.info(f"User signed up: {uid}")
        return profile

    def sign_out(self, uid: str) -> None:
        """Revoke every refresh token issued to the user."""
        try:
            self.auth.revoke_refresh_tokens(uid)
        except Exception as e:
            logger.error(f"SignOut Error: {e}")
            raise AuthenticationError(f"SignOut Error: {e}") from e
        logger.info(f"User signed out: {uid}")

    def delete_account(self, uid: str) -> None:
        """Delete the auth account and the user's profile document."""
        try:
            self.auth.delete_user(uid)
        except Exception as e:
            logger.error(f"DeleteAccount Error: {e}")
            raise AuthenticationError(f"DeleteAccount Error: {e}") from e

        self.delete_document(self.users_collection, uid)
        logger.info(f"Account deleted: {uid}")

    def send_email_verification(self, id_token: str) -> None:
        """Ask Firebase to e-mail a verification link to the signed-in user."""
        try:
            self._auth_rest("sendOobCode", {"requestType": "VERIFY_EMAIL", "idToken": id_token})
        except (httpx.HTTPError, AuthenticationError) as e:
            logger.error(f"EmailVerification Error: {e}")
            raise AuthenticationError(f"EmailVerification Error: {e}") from e

    def is_email_verified(self, uid: str) -> bool:
        try:
            return bool(self.auth.get_user(uid).email_verified)
        except Exception as e:
            logger.error(f"GetUser Error: {e}")
            raise AuthenticationError(f"GetUser Error: {e}") from e
