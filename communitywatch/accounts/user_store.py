"""
User store
Holds the signed-in user's profile and delegates persistence to Firebase.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from communitywatch.accounts.models import User
from communitywatch.accounts.validation import validate_sign_up
from communitywatch.core.config import settings
from communitywatch.crowdsource.report_handler import StoreState
from communitywatch.services.firebase_service import AuthSession

logger = logging.getLogger(__name__)


class UserStore:
    """Profile of the current user plus the account actions behind settings."""

    def __init__(self, service: Any, users_collection: Optional[str] = None):
        self.service = service
        self.users_collection = users_collection or settings.users_collection

        self.user: User = User()
        self.session: Optional[AuthSession] = None
        self.state: StoreState = StoreState.IDLE

    @property
    def locations(self) -> List[str]:
        return self.user.locations

    def _require_user(self) -> str:
        if not self.user.id:
            raise RuntimeError("No user loaded")
        return self.user.id

    def get_user(self, uid: str) -> User:
        """Load a profile from Firestore into the store."""
        self.state = StoreState.PENDING
        try:
            self.user = User.from_document(self.service.fetch_document(self.users_collection, uid))
        finally:
            self.state = StoreState.DONE
        return self.user

    def sign_in(self, email: str, password: str) -> User:
        self.session = self.service.sign_in(email, password)
        return self.get_user(self.session.uid)

    def sign_up(
        self,
        details: Dict[str, str],
        password: str,
        confirm_password: Optional[str] = None,
    ) -> User:
        """
        Validate the form, create the account and load the new profile.

        Raises:
            ValidationError: if a form answer is rejected
            FirebaseServiceError: if account or profile creation fails
        """
        validate_sign_up(details, password, confirm_password)

        profile = {
            "firstName": details["firstName"].strip(),
            "lastName": details["lastName"].strip(),
            "email": details["email"].strip(),
        }
        self.state = StoreState.PENDING
        try:
            self.user = User.from_document(self.service.sign_up(profile, password))
        finally:
            self.state = StoreState.DONE
        return self.user

    def sign_out(self) -> None:
        uid = self._require_user()
        self.service.sign_out(uid)
        self.user = User()
        self.session = None

    def delete_account(self) -> None:
        uid = self._require_user()
        self.service.delete_account(uid)
        logger.info(f"Account {uid} removed")
        self.user = User()
        self.session = None

    def add_location(self, labels: Iterable[str]) -> List[str]:
        """
        Subscribe to location labels, ignoring ones already subscribed.

        Returns:
            The updated subscription list
        """
        uid = self._require_user()
        new_labels: List[str] = []
        for label in labels:
            label = (label or "").strip()
            if label and label not in self.user.locations and label not in new_labels:
                new_labels.append(label)

        if new_labels:
            self.service.array_union(self.users_collection, uid, "locations", new_labels)
            self.user.locations.extend(new_labels)
            logger.info(f"User {uid} subscribed to {new_labels}")

        return self.user.locations

    def remove_location(self, label: str) -> List[str]:
        uid = self._require_user()
        if label in self.user.locations:
            self.service.array_remove(self.users_collection, uid, "locations", [label])
            self.user.locations = [loc for loc in self.user.locations if loc != label]
            logger.info(f"User {uid} unsubscribed from {label}")
        return self.user.locations

    def send_email_verification(self, id_token: Optional[str] = None) -> None:
        token = id_token or (self.session.id_token if self.session else None)
        if not token:
            raise RuntimeError("Sign in before requesting e-mail verification")
        self.service.send_email_verification(token)

    def refresh_verification(self) -> bool:
        """Sync the profile's ``verified`` flag with Firebase Auth."""
        uid = self._require_user()
        verified = self.service.is_email_verified(uid)
        if verified != self.user.verified:
            self.service.update_document(self.users_collection, uid, {"verified": verified})
            self.user.verified = verified
            logger.info(f"User {uid} verification changed to {verified}")
        return verified
