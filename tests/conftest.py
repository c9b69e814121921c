import pytest

from app.compat.handler import ResponseHandler
from app.compat.validator import ApiResponseValidator


@pytest.fixture
def validator():
    return ApiResponseValidator()


@pytest.fixture
def handler(validator):
    return ResponseHandler(validator=validator, max_errors=5)


@pytest.fixture
def api_versions():
    """Response shapes observed across upstream API versions."""
    return [
        {
            "content": "reply v1",
            "id": "msg_123456",
            "timestamp": "2024-01-01T00:00:00.000Z",
            "model": "ai-model-v1",
            "usage": {"total_tokens": 150},
        },
        {
            "text": "reply v2",
            "messageId": "msg_789012",
            "created_at": "2024-01-01T00:00:00.000Z",
            "model_name": "ai-model-v2",
            "token_usage": {"total": 150},
        },
        {
            "response": "reply v4",
            "model": "ai-model-v4",
        },
    ]
