"""タスクの読み取りクエリ。

Supabaseのテーブルからタスクを取得するQuery Objectパターン。
すべての読み取りは所有ユーザーIDの等価フィルタを付与する。
"""

from typing import Any

from .models import TASKS_TABLE, Task


def list_tasks(client: Any, *, user_id: str | None) -> list[Task]:
    """ユーザーのタスク一覧を取得する。

    作成日時の降順（新しい順）で返す。ページネーションや完了状態での絞り込みは行わない。

    Args:
        client: リクエスト単位のSupabaseクライアント。
        user_id: 所有ユーザーID。未指定の場合は問い合わせずに空リストを返す。

    Returns:
        タスクのリスト。

    Raises:
        PostgrestAPIError: プロバイダーが問い合わせを拒否した場合。
        httpx.HTTPError: プロバイダーに接続できない場合。
    """
    if not user_id:
        return []

    response = (
        client.table(TASKS_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return [Task.from_row(row) for row in response.data or []]


def get_task(client: Any, *, task_id: str, user_id: str) -> Task | None:
    """指定IDのタスクを取得する。

    Args:
        client: リクエスト単位のSupabaseクライアント。
        task_id: タスクID。
        user_id: 所有ユーザーID。

    Returns:
        Taskインスタンス。存在しない・他ユーザーのタスクの場合はNone。
    """
    response = (
        client.table(TASKS_TABLE)
        .select("*")
        .eq("id", task_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    rows = response.data or []
    if not rows:
        return None
    return Task.from_row(rows[0])
