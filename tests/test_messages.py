from __future__ import annotations

import pytest

from taskboard.errors import UNKNOWN_ERROR_CODE, ApiException
from taskboard.messages import ERROR_MESSAGES, UI_TEXT, Messages, is_session_error
from taskboard.schemas.system import ApiError

KNOWN_CODES = [
    "UNAUTHORIZED",
    "INVALID_TOKEN",
    "TOKEN_EXPIRED",
    "FORBIDDEN",
    "NOT_FOUND",
    "VALIDATION_ERROR",
    "INVALID_REQUEST",
    "INVALID_DATE_FORMAT",
    "CONFLICT",
    "INTERNAL_ERROR",
]


def _error(
    code: str,
    message: str = "server text",
    details: dict | None = None,
    status_code: int = 400,
) -> ApiException:
    return ApiException(status_code, ApiError(code=code, message=message, details=details))


@pytest.mark.parametrize("locale", ["en", "ja"])
def test_every_known_code_has_text(locale: str) -> None:
    assert set(ERROR_MESSAGES[locale]) == set(KNOWN_CODES)
    assert set(UI_TEXT[locale]) == set(UI_TEXT["en"])


@pytest.mark.parametrize("code", KNOWN_CODES)
def test_known_codes_use_the_lookup_table(code: str) -> None:
    messages = Messages("en")

    assert messages.error_message(_error(code)) == ERROR_MESSAGES["en"][code]


def test_japanese_locale() -> None:
    messages = Messages("ja")

    assert messages.error_message(_error("FORBIDDEN")) == "この操作を実行する権限がありません。"
    assert messages.error_message(_error("NOT_FOUND", details={"field": "id"})).endswith("（項目: id）")


def test_unsupported_locale_falls_back_to_english() -> None:
    assert Messages("fr").locale == "en"


def test_field_detail_is_appended() -> None:
    text = Messages().error_message(_error("VALIDATION_ERROR", details={"field": "title"}))

    assert text == "Some of the values you entered are invalid.\n(field: title)"


def test_details_without_field_are_ignored() -> None:
    text = Messages().error_message(_error("CONFLICT", details={"reason": "duplicate"}))

    assert text == "This data already exists."


def test_unknown_code_shows_server_message() -> None:
    assert Messages().error_message(_error("RATE_LIMITED", message="slow down")) == "slow down"
    assert Messages().error_message(ApiException.unknown(502)) == "HTTP Error 502"


def test_unknown_code_without_message_is_generic() -> None:
    assert Messages().error_message(_error("RATE_LIMITED", message="")) == "An error occurred."


def test_non_api_errors_are_generic() -> None:
    assert Messages().error_message(RuntimeError("boom")) == "An error occurred."


def test_action_failed_joins_prefix_and_reason() -> None:
    text = Messages().action_failed("login_failed", _error("UNAUTHORIZED"))

    assert text == "Login failed.\n\nAuthentication required. Please log in."


def test_delete_failed_adds_owner_hint_only_for_forbidden() -> None:
    messages = Messages()

    forbidden = messages.delete_failed(_error("FORBIDDEN", status_code=403))
    missing = messages.delete_failed(_error("NOT_FOUND", status_code=404))

    assert forbidden.endswith("Only the creator of a task can delete it.")
    assert "Only the creator" not in missing
    assert missing.startswith("Failed to delete the task.")


def test_session_error_codes() -> None:
    assert is_session_error(_error("INVALID_TOKEN", status_code=401))
    assert is_session_error(_error("TOKEN_EXPIRED", status_code=401))
    assert not is_session_error(_error("FORBIDDEN", status_code=403))
    assert not is_session_error(ApiException.unknown(401))
    assert ApiException.unknown(401).code == UNKNOWN_ERROR_CODE
