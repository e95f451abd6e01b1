"""Supabaseセッションの解決と、認証済みユーザーIDを扱う補助関数。

すべてのローダー/アクションは、タスクデータに触れる前に ``resolve_session`` を呼ぶ。
プロバイダーへの問い合わせに失敗した場合も「未ログイン」として扱い、
両者を区別しない。
"""

import logging
from dataclasses import dataclass

import httpx
from django.http import HttpRequest, HttpResponse
from supabase import AuthError

from .provider import ProviderExchange, create_provider_exchange

logger = logging.getLogger(__name__)


class NotAuthenticated(Exception):
    """セッションが無い状態で書き込みを行おうとした。"""


@dataclass(frozen=True)
class SessionUser:
    """プロバイダーから見えるユーザー情報。

    Attributes:
        id: ユーザーID（プロバイダーが発行）。
        email: メールアドレス。
    """

    id: str
    email: str | None = None


@dataclass(frozen=True)
class SessionContext:
    """解決済みのセッションとリクエスト単位のクライアント。"""

    exchange: ProviderExchange
    user: SessionUser | None = None

    @property
    def client(self):
        return self.exchange.client

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def finalize(self, response: HttpResponse) -> HttpResponse:
        """セッションCookieの更新をレスポンスへ反映する。"""
        return self.exchange.finalize(response)


def resolve_session(request: HttpRequest) -> SessionContext:
    """リクエストのCookieからセッションを解決する。

    セッション参照時にトークンが更新されると、Cookieの変更が保留される。
    返却するレスポンスは ``SessionContext.finalize`` を通すこと。

    Args:
        request: HTTPリクエスト。

    Returns:
        セッションコンテキスト。セッションが無い・取得に失敗した場合は user が None。
    """
    exchange = create_provider_exchange(request)

    try:
        session = exchange.client.auth.get_session()
    except (AuthError, httpx.HTTPError) as exc:
        logger.warning("セッションの取得に失敗しました。未ログインとして扱います: error=%s", exc)
        return SessionContext(exchange=exchange)

    if session is None or session.user is None:
        return SessionContext(exchange=exchange)

    # テーブル操作をユーザーのトークンで行う
    exchange.client.postgrest.auth(session.access_token)

    user = SessionUser(id=str(session.user.id), email=session.user.email)
    return SessionContext(exchange=exchange, user=user)


def get_authenticated_user_id(context: SessionContext) -> str:
    """認証済みユーザーのIDを取得する。

    Args:
        context: 解決済みのセッションコンテキスト。

    Returns:
        ユーザーID。

    Raises:
        NotAuthenticated: セッションが無い場合。
    """
    if context.user is None:
        raise NotAuthenticated("User must be authenticated")
    return context.user.id
