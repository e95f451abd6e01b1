"""タスク操作のビジネスロジック（サービス層）。

書き込み操作（create/toggle/edit/delete）とログアウトを提供する。
Result型で成功/失敗を表現し、プロバイダーのエラーメッセージはそのまま error に入れる。
すべての書き込みは所有ユーザーIDの等価フィルタを付与する。
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from supabase import AuthError, PostgrestAPIError

from django_tasks.provider import ProviderExchange

from .models import TASKS_TABLE, Task
from .queries import get_task

logger = logging.getLogger(__name__)

TASK_NOT_FOUND_MESSAGE = "タスクが見つかりません。"

# =============================================================================
# Result 型
# =============================================================================


@dataclass(frozen=True)
class CreateTaskResult:
    """タスク作成の結果。"""

    success: bool
    task: Task | None = None
    error: str | None = None


@dataclass(frozen=True)
class ToggleTaskResult:
    """完了状態トグルの結果。"""

    success: bool
    task: Task | None = None
    old_status: bool = False
    error: str | None = None


@dataclass(frozen=True)
class EditTaskResult:
    """タイトル更新の結果。"""

    success: bool
    task: Task | None = None
    error: str | None = None


@dataclass(frozen=True)
class DeleteTaskResult:
    """タスク削除の結果。"""

    success: bool
    deleted_count: int = 0
    error: str | None = None


def _error_message(exc: PostgrestAPIError | httpx.HTTPError) -> str:
    if isinstance(exc, PostgrestAPIError):
        return exc.message or str(exc)
    return str(exc)


def _first_task(response: Any) -> Task | None:
    rows = response.data or []
    if not rows:
        return None
    return Task.from_row(rows[0])


# =============================================================================
# 作成
# =============================================================================


def create_task(client: Any, *, user_id: str, title: str) -> CreateTaskResult:
    """タスクを作成する。

    Args:
        client: リクエスト単位のSupabaseクライアント。
        user_id: 所有ユーザーID。
        title: タイトル。タイトルの重複は許可する。

    Returns:
        CreateTaskResult。失敗時はerrorにプロバイダーのメッセージ。
    """
    try:
        response = (
            client.table(TASKS_TABLE)
            .insert({"title": title, "user_id": user_id, "completed": False})
            .execute()
        )
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        return CreateTaskResult(success=False, error=_error_message(exc))

    return CreateTaskResult(success=True, task=_first_task(response))


# =============================================================================
# 更新
# =============================================================================


def toggle_task(client: Any, *, task_id: str, user_id: str) -> ToggleTaskResult:
    """完了状態をトグルする。

    現在の値はフォームから受け取らず、保存されている値を読み直してから反転する。

    Args:
        client: リクエスト単位のSupabaseクライアント。
        task_id: タスクID。
        user_id: 所有ユーザーID。

    Returns:
        ToggleTaskResult。old_statusに変更前の状態。
    """
    try:
        task = get_task(client, task_id=task_id, user_id=user_id)
        if task is None:
            return ToggleTaskResult(success=False, error=TASK_NOT_FOUND_MESSAGE)

        response = (
            client.table(TASKS_TABLE)
            .update({"completed": not task.completed})
            .eq("id", task_id)
            .eq("user_id", user_id)
            .execute()
        )
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        return ToggleTaskResult(success=False, error=_error_message(exc))

    return ToggleTaskResult(
        success=True,
        task=_first_task(response),
        old_status=task.completed,
    )


def edit_task(client: Any, *, task_id: str, user_id: str, title: str) -> EditTaskResult:
    """タイトルを更新する。完了状態は変更しない。

    Args:
        client: リクエスト単位のSupabaseクライアント。
        task_id: タスクID。
        user_id: 所有ユーザーID。
        title: 新しいタイトル。

    Returns:
        EditTaskResult。失敗時はerrorにプロバイダーのメッセージ。
    """
    try:
        response = (
            client.table(TASKS_TABLE)
            .update({"title": title})
            .eq("id", task_id)
            .eq("user_id", user_id)
            .execute()
        )
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        return EditTaskResult(success=False, error=_error_message(exc))

    task = _first_task(response)
    if task is None:
        return EditTaskResult(success=False, error=TASK_NOT_FOUND_MESSAGE)
    return EditTaskResult(success=True, task=task)


# =============================================================================
# 削除
# =============================================================================


def delete_task(client: Any, *, task_id: str, user_id: str) -> DeleteTaskResult:
    """タスクを削除する。

    他ユーザーのタスクIDを指定した場合は何も削除されない（エラーにはしない）。

    Args:
        client: リクエスト単位のSupabaseクライアント。
        task_id: タスクID。
        user_id: 所有ユーザーID。

    Returns:
        DeleteTaskResult。deleted_countに削除件数。
    """
    try:
        response = (
            client.table(TASKS_TABLE)
            .delete()
            .eq("id", task_id)
            .eq("user_id", user_id)
            .execute()
        )
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        return DeleteTaskResult(success=False, error=_error_message(exc))

    return DeleteTaskResult(success=True, deleted_count=len(response.data or []))


# =============================================================================
# ログアウト
# =============================================================================


def sign_out(exchange: ProviderExchange) -> None:
    """プロバイダーのセッションを終了する。

    プロバイダー側の失効に失敗しても、セッションCookieは削除する。

    Args:
        exchange: リクエスト単位のクライアントとCookieストレージ。
    """
    try:
        exchange.client.auth.sign_out()
    except (AuthError, httpx.HTTPError) as exc:
        logger.warning("プロバイダーのサインアウトに失敗しました: error=%s", exc)
        exchange.storage.clear()
