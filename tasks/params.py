"""タスク画面のフォームで送られる操作種別（``_action``）の解析・正規化。

標準ライブラリのみに依存する。
"""

from enum import StrEnum
from typing import Final

# =============================================================================
# 定数
# =============================================================================

ACTION_FIELD: Final[str] = "_action"
TITLE_MAX_LENGTH: Final[int] = 255


# =============================================================================
# Enum
# =============================================================================


class TaskAction(StrEnum):
    """タスク画面から送信される操作。

    UNRECOGNIZED は未指定・不明な値を表す。何も書き込まずに成功として扱う。
    """

    CREATE = "create"
    TOGGLE = "toggle"
    DELETE = "delete"
    EDIT = "edit"
    LOGOUT = "logout"
    UNRECOGNIZED = "unrecognized"


# =============================================================================
# パラメータ正規化
# =============================================================================


def parse_task_action(raw_action: str | None) -> TaskAction:
    """タスク画面の ``_action`` を正規化する。

    Args:
        raw_action: フォームで受け取った値。

    Returns:
        正規化された操作。未指定・不正値は UNRECOGNIZED。
    """
    if raw_action is None:
        return TaskAction.UNRECOGNIZED

    try:
        return TaskAction(raw_action.strip().lower())
    except ValueError:
        return TaskAction.UNRECOGNIZED
