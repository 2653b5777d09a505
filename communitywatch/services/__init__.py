"""
CommunityWatch - Backend Services
Firebase Authentication and Firestore access.
"""

from communitywatch.services.firebase_service import (
    FirebaseService,
    FirebaseServiceError,
    DocumentNotFoundError,
    AuthenticationError,
    AuthSession,
)

__all__ = [
    "FirebaseService",
    "FirebaseServiceError",
    "DocumentNotFoundError",
    "AuthenticationError",
    "AuthSession",
]
