"""
Tests for feedback submission
"""
import uuid

import pytest
from datetime import datetime, timezone

from communitywatch.crowdsource.feedback import submit_feedback
from communitywatch.crowdsource.validation import ValidationError
from communitywatch.services.firebase_service import FirebaseServiceError


class TestSubmitFeedback:
    """Test suite for submit_feedback."""

    def test_submit_feedback(self, mock_service, sample_user):
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

        feedback_id = submit_feedback(mock_service, sample_user, "  Love the heat map  ", now=now)

        uuid.UUID(feedback_id)
        collection, doc_id, document = mock_service.send_document.call_args[0]
        assert collection == "feedback"
        assert doc_id == feedback_id
        assert document == {
            "feedback": "Love the heat map",
            "date": now,
            "userId": "u1",
            "name": "Thandi",
        }

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_feedback_rejected(self, mock_service, sample_user, text):
        with pytest.raises(ValidationError, match="Please enter your feedback."):
            submit_feedback(mock_service, sample_user, text)
        mock_service.send_document.assert_not_called()

    def test_backend_error_propagates(self, mock_service, sample_user):
        mock_service.send_document.side_effect = FirebaseServiceError("SendDocument Error: denied")

        with pytest.raises(FirebaseServiceError):
            submit_feedback(mock_service, sample_user, "Great app")
