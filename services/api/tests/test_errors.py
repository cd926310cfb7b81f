from unittest.mock import patch

import pytest

from prepclock.errors import (
    ApiError, Conflict, InternalError, NotFound, ValidationFailed,
    failure_message, require_text,
)


def test_error_body_includes_extra():
    err = Conflict("busy", extra={"activeSession": {"id": "t1"}})
    assert err.status_code == 400
    assert err.to_body() == {"error": "busy", "activeSession": {"id": "t1"}}


def test_require_text():
    assert require_text("  soup ", "bad") == "soup"
    with pytest.raises(ValidationFailed) as exc:
        require_text("   ", "Title is required")
    assert exc.value.message == "Title is required"
    with pytest.raises(ValidationFailed):
        require_text(None, "bad")


def test_failure_message_passes_api_errors_through():
    with pytest.raises(NotFound):
        with failure_message("load meal"):
            raise NotFound("Meal not found")


def test_failure_message_hides_unexpected_errors():
    with pytest.raises(InternalError) as exc:
        with failure_message("load meal"):
            raise RuntimeError("connection reset by peer")
    assert exc.value.to_body() == {"error": "Failed to load meal"}
    assert isinstance(exc.value, ApiError)
    assert exc.value.status_code == 500


def test_storage_failure_is_reported_generically(client, user_headers):
    with patch("prepclock.services.meals.list_meals", side_effect=RuntimeError("db exploded")):
        response = client.get("/api/meals", headers=user_headers)
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to retrieve meals"}
