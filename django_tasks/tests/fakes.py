"""テスト用のインメモリSupabaseクライアント。

``settings.SUPABASE_CLIENT_FACTORY`` に ``create_fake_client`` を指定すると、
認証とテーブル操作がモジュール共有の ``backend`` に対して行われる。
各テストの setUp で ``backend.reset()`` を呼ぶこと。
"""

import itertools
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Final

import httpx
from django.test import Client
from supabase import AuthError, PostgrestAPIError

AUTH_STORAGE_KEY: Final[str] = "sb-fake-auth-token"
CODE_VERIFIER_KEY: Final[str] = f"{AUTH_STORAGE_KEY}-code-verifier"

_BASE_TIME: Final[datetime] = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeAuthError(AuthError):
    """プロバイダーの認証エラー。"""

    def __init__(self, message: str, code: str | None = None) -> None:
        Exception.__init__(self, message)
        self.message = message
        self.code = code
        self.name = "AuthError"


@dataclass(frozen=True)
class FakeUser:
    id: str
    email: str


@dataclass(frozen=True)
class FakeSession:
    access_token: str
    user: FakeUser


@dataclass(frozen=True)
class FakeAuthResponse:
    user: FakeUser | None = None
    session: FakeSession | None = None


@dataclass(frozen=True)
class FakeAPIResponse:
    data: list[dict[str, Any]]


class FakeBackend:
    """プロバイダー側の状態（ユーザー、セッション、テーブル）。"""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.passwords: dict[str, str] = {}
        self.users: dict[str, FakeUser] = {}
        self.confirmed: set[str] = set()
        self.sessions: dict[str, FakeUser] = {}
        self.codes: dict[str, FakeUser] = {}
        self.tables: dict[str, list[dict[str, Any]]] = {"tasks": []}
        self.postgrest_tokens: list[str] = []
        self.query_log: list[tuple[str, str]] = []

        # 振る舞いの切り替え
        self.autoconfirm = True
        self.auth_unavailable = False
        self.rotate_session_on_read = False
        self.sign_out_fails = False
        self.write_error: str | None = None
        self.read_error: str | None = None
        self.database_unavailable = False
        self.last_email_redirect_to: str | None = None

        self._clock = itertools.count()

    def now(self) -> str:
        return (_BASE_TIME + timedelta(seconds=next(self._clock))).isoformat()

    def create_user(self, email: str, password: str = "password123", *, confirmed: bool = True) -> FakeUser:
        user = FakeUser(id=str(uuid.uuid4()), email=email)
        self.users[email] = user
        self.passwords[email] = password
        if confirmed:
            self.confirmed.add(email)
        return user

    def issue_session(self, user: FakeUser) -> FakeSession:
        token = uuid.uuid4().hex
        self.sessions[token] = user
        return FakeSession(access_token=token, user=user)

    def issue_code(self, user: FakeUser) -> str:
        code = uuid.uuid4().hex
        self.codes[code] = user
        return code

    def add_task(self, *, user_id: str, title: str, completed: bool = False) -> dict[str, Any]:
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "title": title,
            "completed": completed,
            "created_at": self.now(),
        }
        self.tables["tasks"].append(row)
        return dict(row)

    def tasks_for(self, user_id: str) -> list[dict[str, Any]]:
        return [dict(row) for row in self.tables["tasks"] if row["user_id"] == user_id]

    def find_task(self, task_id: str) -> dict[str, Any] | None:
        for row in self.tables["tasks"]:
            if row["id"] == task_id:
                return dict(row)
        return None

    def write_count(self) -> int:
        return sum(1 for op, _ in self.query_log if op != "select")


backend = FakeBackend()


class FakeAuth:
    """Supabase Auth クライアントのフェイク。セッションは storage に保存する。"""

    def __init__(self, storage: Any) -> None:
        self._storage = storage

    def _save(self, session: FakeSession) -> None:
        self._storage.set_item(AUTH_STORAGE_KEY, session.access_token)

    def get_session(self) -> FakeSession | None:
        if backend.auth_unavailable:
            raise FakeAuthError("Service unavailable")

        token = self._storage.get_item(AUTH_STORAGE_KEY)
        if not token:
            return None
        user = backend.sessions.get(token)
        if user is None:
            return None

        if backend.rotate_session_on_read:
            del backend.sessions[token]
            session = backend.issue_session(user)
            self._save(session)
            return session
        return FakeSession(access_token=token, user=user)

    def sign_in_with_password(self, credentials: dict[str, str]) -> FakeAuthResponse:
        email = credentials["email"]
        user = backend.users.get(email)
        if user is None or backend.passwords.get(email) != credentials["password"]:
            raise FakeAuthError("Invalid login credentials", "invalid_credentials")
        if email not in backend.confirmed:
            raise FakeAuthError("Email not confirmed", "email_not_confirmed")

        session = backend.issue_session(user)
        self._save(session)
        return FakeAuthResponse(user=user, session=session)

    def sign_up(self, credentials: dict[str, Any]) -> FakeAuthResponse:
        email = credentials["email"]
        if email in backend.users:
            raise FakeAuthError("User already registered", "user_already_exists")

        backend.last_email_redirect_to = credentials.get("options", {}).get("email_redirect_to")
        user = backend.create_user(email, credentials["password"], confirmed=backend.autoconfirm)
        if not backend.autoconfirm:
            self._storage.set_item(CODE_VERIFIER_KEY, "fake-code-verifier")
            return FakeAuthResponse(user=user)

        session = backend.issue_session(user)
        self._save(session)
        return FakeAuthResponse(user=user, session=session)

    def sign_out(self) -> None:
        if backend.sign_out_fails:
            raise FakeAuthError("Session not found", "session_not_found")

        token = self._storage.get_item(AUTH_STORAGE_KEY)
        if token:
            backend.sessions.pop(token, None)
        self._storage.remove_item(AUTH_STORAGE_KEY)

    def exchange_code_for_session(self, params: dict[str, str]) -> FakeAuthResponse:
        user = backend.codes.pop(params["auth_code"], None)
        if user is None:
            raise FakeAuthError("invalid flow state, no valid flow state found", "flow_state_not_found")

        backend.confirmed.add(user.email)
        self._storage.remove_item(CODE_VERIFIER_KEY)
        session = backend.issue_session(user)
        self._save(session)
        return FakeAuthResponse(user=user, session=session)


class FakePostgrest:
    def auth(self, token: str) -> None:
        backend.postgrest_tokens.append(token)


class FakeQuery:
    """PostgRESTクエリビルダーのフェイク。"""

    def __init__(self, table: str) -> None:
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._filters: list[tuple[str, Any]] = []
        self._order: tuple[str, bool] | None = None
        self._limit: int | None = None

    def select(self, *columns: str) -> "FakeQuery":
        self._op = "select"
        return self

    def insert(self, values: dict[str, Any] | list[dict[str, Any]]) -> "FakeQuery":
        self._op = "insert"
        self._payload = values if isinstance(values, list) else [values]
        return self

    def update(self, values: dict[str, Any]) -> "FakeQuery":
        self._op = "update"
        self._payload = values
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def order(self, column: str, *, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self._limit = size
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(str(row.get(column)) == str(value) for column, value in self._filters)

    def execute(self) -> FakeAPIResponse:
        backend.query_log.append((self._op, self._table))
        if backend.database_unavailable:
            raise httpx.ConnectError("connection refused")
        error = backend.read_error if self._op == "select" else backend.write_error
        if error is not None:
            raise PostgrestAPIError({"message": error, "code": "XX000", "hint": None, "details": None})

        rows = backend.tables.setdefault(self._table, [])

        if self._op == "insert":
            inserted = []
            for values in self._payload:
                if values.get("title") is None:
                    raise PostgrestAPIError(
                        {
                            "message": 'null value in column "title" violates not-null constraint',
                            "code": "23502",
                            "hint": None,
                            "details": None,
                        }
                    )
                row = {"id": str(uuid.uuid4()), "completed": False, "created_at": backend.now(), **values}
                rows.append(row)
                inserted.append(dict(row))
            return FakeAPIResponse(data=inserted)

        matched = [row for row in rows if self._matches(row)]

        if self._op == "update":
            for row in matched:
                row.update(self._payload)
            return FakeAPIResponse(data=[dict(row) for row in matched])

        if self._op == "delete":
            backend.tables[self._table] = [row for row in rows if not self._matches(row)]
            return FakeAPIResponse(data=[dict(row) for row in matched])

        if self._order is not None:
            column, desc = self._order
            matched.sort(key=lambda row: row[column], reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        return FakeAPIResponse(data=[dict(row) for row in matched])


class FakeClient:
    def __init__(self, options: Any) -> None:
        self.auth = FakeAuth(options.storage)
        self.postgrest = FakePostgrest()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(name)


def create_fake_client(supabase_url: str, supabase_key: str, options: Any = None) -> FakeClient:
    """``supabase.create_client`` と同じシグネチャのフェイク生成関数。"""
    return FakeClient(options)


def sign_in(client: Client, user: FakeUser) -> FakeSession:
    """テストクライアントにセッションCookieを設定する。

    Args:
        client: Djangoのテストクライアント。
        user: ログインさせるユーザー。

    Returns:
        発行したセッション。
    """
    session = backend.issue_session(user)
    client.cookies[AUTH_STORAGE_KEY] = session.access_token
    return session
