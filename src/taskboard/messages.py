"""User-facing text: error-code lookup tables and action failure messages."""

from __future__ import annotations

from .errors import ApiException

ERROR_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        # authentication
        "UNAUTHORIZED": "Authentication required. Please log in.",
        "INVALID_TOKEN": "Your token is invalid or expired. Please log in again.",
        "TOKEN_EXPIRED": "Your session has expired. Please log in again.",
        # authorization
        "FORBIDDEN": "You do not have permission to perform this action.",
        "NOT_FOUND": "The requested resource was not found.",
        # validation
        "VALIDATION_ERROR": "Some of the values you entered are invalid.",
        "INVALID_REQUEST": "The request was malformed.",
        "INVALID_DATE_FORMAT": "The date format is invalid (use ISO 8601).",
        "CONFLICT": "This data already exists.",
        "INTERNAL_ERROR": "A server error occurred. Please try again later.",
    },
    "ja": {
        "UNAUTHORIZED": "認証が必要です。ログインしてください。",
        "INVALID_TOKEN": "トークンが無効または期限切れです。再度ログインしてください。",
        "TOKEN_EXPIRED": "セッションが期限切れです。再度ログインしてください。",
        "FORBIDDEN": "この操作を実行する権限がありません。",
        "NOT_FOUND": "指定されたリソースが見つかりません。",
        "VALIDATION_ERROR": "入力内容に誤りがあります。",
        "INVALID_REQUEST": "リクエストの形式が正しくありません。",
        "INVALID_DATE_FORMAT": "日付の形式が正しくありません（ISO8601形式で入力してください）。",
        "CONFLICT": "すでに存在するデータです。",
        "INTERNAL_ERROR": "サーバーエラーが発生しました。しばらくしてから再度お試しください。",
    },
}

UI_TEXT: dict[str, dict[str, str]] = {
    "en": {
        "generic_error": "An error occurred.",
        "field_suffix": "(field: {field})",
        "login_failed": "Login failed.",
        "signup_failed": "Signup failed.",
        "create_failed": "Failed to create the task.",
        "update_failed": "Failed to update the task.",
        "delete_failed": "Failed to delete the task.",
        "logout_failed": "Signed out locally, but the server could not confirm the logout.",
        "task_created": "Task created.",
        "task_updated": "Task updated.",
        "task_deleted": "Task deleted.",
        "delete_owner_only": "Only the creator of a task can delete it.",
        "delete_confirm": "Are you sure you want to delete this task? This cannot be undone.",
        "logged_out": "You have been signed out.",
        "form_expired": "The form has expired. Please try again.",
    },
    "ja": {
        "generic_error": "エラーが発生しました。",
        "field_suffix": "（項目: {field}）",
        "login_failed": "ログインに失敗しました。",
        "signup_failed": "ユーザー登録に失敗しました。",
        "create_failed": "タスクの作成に失敗しました。",
        "update_failed": "タスクの更新に失敗しました。",
        "delete_failed": "タスクの削除に失敗しました。",
        "logout_failed": "ログアウト処理でサーバーとの通信に失敗しました。",
        "task_created": "✓ タスクを作成しました。",
        "task_updated": "✓ タスクを更新しました。",
        "task_deleted": "✓ タスクを削除しました。",
        "delete_owner_only": "このタスクを削除できるのは、タスクの作成者のみです。",
        "delete_confirm": "このタスクを削除してもよろしいですか？\n\n削除すると元に戻せません。",
        "logged_out": "ログアウトしました。",
        "form_expired": "フォームの有効期限が切れました。もう一度お試しください。",
    },
}

SESSION_ERROR_CODES = frozenset({"UNAUTHORIZED", "INVALID_TOKEN", "TOKEN_EXPIRED"})


class Messages:
    """Text lookups bound to one locale."""

    def __init__(self, locale: str = "en") -> None:
        self.locale = locale if locale in ERROR_MESSAGES else "en"
        self._errors = ERROR_MESSAGES[self.locale]
        self._text = UI_TEXT[self.locale]

    def text(self, key: str, **params: object) -> str:
        template = self._text[key]
        return template.format(**params) if params else template

    def error_message(self, error: BaseException) -> str:
        """Map an exception to the text shown to the user.

        Known codes use the lookup table, with the offending field appended
        when the server names one. Unknown codes show the server's own message.
        """

        if not isinstance(error, ApiException):
            return self._text["generic_error"]
        known = self._errors.get(error.code)
        if known is None:
            return error.message or self._text["generic_error"]
        field = (error.details or {}).get("field")
        if field:
            return f"{known}\n{self.text('field_suffix', field=field)}"
        return known

    def action_failed(self, action_key: str, error: BaseException, *, hint: str | None = None) -> str:
        """Compose the blocking failure notice for a user action."""

        parts = [self._text[action_key], self.error_message(error)]
        if hint:
            parts.append(hint)
        return "\n\n".join(parts)

    def delete_failed(self, error: BaseException) -> str:
        hint = None
        if isinstance(error, ApiException) and error.code == "FORBIDDEN":
            hint = self._text["delete_owner_only"]
        return self.action_failed("delete_failed", error, hint=hint)


def is_session_error(error: BaseException) -> bool:
    return isinstance(error, ApiException) and error.code in SESSION_ERROR_CODES


__all__ = ["ERROR_MESSAGES", "Messages", "SESSION_ERROR_CODES", "UI_TEXT", "is_session_error"]
