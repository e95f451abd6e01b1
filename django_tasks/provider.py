"""Supabaseクライアントをリクエスト/レスポンスの組に結びつけるファクトリ。

Supabase Auth はセッションを ``storage`` に保存する。ここでは保存先をリクエストの
Cookieに割り当て、リクエスト処理中に行われた書き込み（ログイン、トークン更新、
ログアウト）を「保留中のCookie変更」として記録する。

呼び出し側は返却する ``HttpResponse`` に対して必ず ``finalize()`` を呼ぶこと。
呼ばなかった場合、更新されたセッションがブラウザに届かず、次のリクエストで
ログアウト状態になる。
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.utils.module_loading import import_string
from supabase import ClientOptions


class CookieSessionStorage:
    """Supabase Auth 用のCookieバックエンドのストレージ。

    ``get_item`` / ``set_item`` / ``remove_item`` を備え、
    Supabaseクライアントの ``storage`` オプションとしてそのまま渡せる。

    Attributes:
        pending: 保留中のCookie変更。値が None のものは削除を表す。
    """

    def __init__(self, cookies: Mapping[str, str]) -> None:
        self._cookies: dict[str, str] = dict(cookies)
        self._seen: set[str] = set()
        self.pending: dict[str, str | None] = {}

    def get_item(self, key: str) -> str | None:
        self._seen.add(key)
        return self._cookies.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._seen.add(key)
        self._cookies[key] = value
        self.pending[key] = value

    def remove_item(self, key: str) -> None:
        self._seen.add(key)
        # 存在しないCookieの削除はレスポンスに含めない
        if self._cookies.pop(key, None) is not None or key in self.pending:
            self.pending[key] = None

    def clear(self) -> None:
        """このリクエストで参照したセッションCookieをすべて削除予定にする。"""
        for key in list(self._seen):
            self.remove_item(key)

    def apply(self, response: HttpResponse) -> None:
        """保留中のCookie変更をレスポンスへ反映する。

        Args:
            response: 反映先のレスポンス。
        """
        for key, value in self.pending.items():
            if value is None:
                response.delete_cookie(key, path="/", samesite="Lax")
                continue
            response.set_cookie(
                key,
                value,
                max_age=settings.SUPABASE_AUTH_COOKIE_MAX_AGE,
                path="/",
                secure=settings.SUPABASE_AUTH_COOKIE_SECURE,
                httponly=True,
                samesite="Lax",
            )


@dataclass(frozen=True)
class ProviderExchange:
    """1リクエスト分のSupabaseクライアントとCookieストレージ。"""

    client: Any
    storage: CookieSessionStorage

    def finalize(self, response: HttpResponse) -> HttpResponse:
        """保留中のセッションCookieをレスポンスへ反映して返す。"""
        self.storage.apply(response)
        return response


def create_provider_exchange(request: HttpRequest) -> ProviderExchange:
    """リクエストのCookieに結びついたSupabaseクライアントを生成する。

    クライアントの生成関数は ``settings.SUPABASE_CLIENT_FACTORY`` で差し替えられる
    （テストではインメモリのフェイクを使う）。

    Args:
        request: HTTPリクエスト。

    Returns:
        クライアントとCookieストレージの組。
    """
    storage = CookieSessionStorage(request.COOKIES)
    factory = import_string(settings.SUPABASE_CLIENT_FACTORY)
    client = factory(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        options=ClientOptions(
            storage=storage,
            flow_type="pkce",
            auto_refresh_token=False,
            persist_session=True,
        ),
    )
    return ProviderExchange(client=client, storage=storage)
