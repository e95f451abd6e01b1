"""タスクのデータ表現。

タスクはSupabaseの ``tasks`` テーブルに保存される。ローカルDBは持たないため、
Djangoモデルではなくプロバイダーの行から組み立てる値オブジェクトとして扱う。
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

from django.utils.dateparse import parse_datetime

TASKS_TABLE: Final[str] = "tasks"


@dataclass(frozen=True)
class Task:
    """タスクを表す値オブジェクト。

    Attributes:
        id: プロバイダーが生成する一意なID。
        user_id: 所有ユーザーのID。所有者は変更されない。
        title: タスクのタイトル。
        completed: 完了状態。作成時はFalse。
        created_at: 作成日時。一覧の並び順にのみ使う。
    """

    id: str
    user_id: str
    title: str
    completed: bool = False
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Task":
        """``tasks`` テーブルの行からTaskを生成する。

        Args:
            row: プロバイダーが返した行。

        Returns:
            Taskインスタンス。
        """
        created_at = row.get("created_at")
        if isinstance(created_at, str):
            created_at = parse_datetime(created_at)

        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            title=row.get("title") or "",
            completed=bool(row.get("completed", False)),
            created_at=created_at,
        )

    def __str__(self) -> str:
        return self.title
