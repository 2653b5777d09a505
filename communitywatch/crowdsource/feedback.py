"""
User feedback submission.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from communitywatch.core.config import settings
from communitywatch.crowdsource.validation import ValidationError

logger = logging.getLogger(__name__)


def submit_feedback(
    service: Any,
    user: Any,
    feedback: str,
    now: Optional[datetime] = None,
) -> str:
    """
    Store a piece of free-text feedback from a user.

    Returns:
        The generated feedback document id

    Raises:
        ValidationError: if the feedback is empty
        FirebaseServiceError: if the write fails
    """
    if not feedback or not feedback.strip():
        raise ValidationError("Please enter your feedback.")

    feedback_id = str(uuid.uuid4())
    document: Dict[str, Any] = {
        "feedback": feedback.strip(),
        "date": now or datetime.now(timezone.utc),
        "userId": user.id,
        "name": user.first_name,
    }
    service.send_document(settings.feedback_collection, feedback_id, document)

    logger.info(f"Feedback {feedback_id} received from {user.id}")
    return feedback_id
