"""ログイン画面の操作種別と固定メッセージ。"""

from enum import StrEnum
from typing import Final

DUPLICATE_SIGNUP_MESSAGE: Final[str] = "このメールアドレスは既に登録されています。ログインしてください。"
CONFIRMATION_SENT_MESSAGE: Final[str] = "確認メールを送信しました。メール内のリンクから登録を完了してください。"
INVALID_ACTION_MESSAGE: Final[str] = "不正な操作です。"


class AuthAction(StrEnum):
    """ログイン画面から送信される操作。"""

    LOGIN = "login"
    SIGNUP = "signup"
    UNRECOGNIZED = "unrecognized"


def parse_auth_action(raw_action: str | None) -> AuthAction:
    """ログイン画面の ``_action`` を正規化する。

    Args:
        raw_action: フォームで受け取った値。

    Returns:
        正規化された操作。未指定・不正値は UNRECOGNIZED。
    """
    if raw_action is None:
        return AuthAction.UNRECOGNIZED

    try:
        return AuthAction(raw_action.strip().lower())
    except ValueError:
        return AuthAction.UNRECOGNIZED
