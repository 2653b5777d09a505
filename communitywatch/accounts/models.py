"""
User profile model.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class User:
    """
    Profile stored in the ``users`` collection, keyed by the Firebase Auth uid.

    Attributes:
        id: Firebase Auth uid
        first_name: Given name, shown on the user's reports
        last_name: Family name
        email: Sign-in e-mail
        trust_points: Reputation counter
        verified: Whether the e-mail address has been verified
        date_joined: Month and year of sign-up, e.g. "Oct 2026"
        locations: Subscribed location labels
    """
    id: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    trust_points: int = 0
    verified: bool = False
    date_joined: str = ""
    locations: List[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=data.get("id", ""),
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            email=data.get("email", ""),
            trust_points=int(data.get("trustPoints") or 0),
            verified=bool(data.get("verified", False)),
            date_joined=data.get("dateJoined", ""),
            locations=list(data.get("locations") or []),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "trustPoints": self.trust_points,
            "verified": self.verified,
            "dateJoined": self.date_joined,
            "locations": list(self.locations),
        }

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)
