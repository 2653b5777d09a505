"""
CommunityWatch - Accounts Module
User profiles, sign-up validation and account actions.
"""

from communitywatch.accounts.models import User
from communitywatch.accounts.user_store import UserStore
from communitywatch.accounts.validation import (
    validate_email,
    validate_password,
    validate_sign_up,
)

__all__ = [
    "User",
    "UserStore",
    "validate_email",
    "validate_password",
    "validate_sign_up",
]
