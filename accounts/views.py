"""accountsアプリケーションのビュー。

ログイン・新規登録・確認メールのコールバックを扱う。
資格情報の検証とセッション発行はすべてプロバイダー（Supabase Auth）に任せる。
"""

import logging
from http import HTTPStatus
from typing import Final

import httpx
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_http_methods
from supabase import AuthError

from django_tasks.auth import SessionContext, resolve_session
from django_tasks.provider import create_provider_exchange
from shared.enums import RequestMethod
from tasks.params import ACTION_FIELD

from .forms import CredentialsForm
from .params import (
    CONFIRMATION_SENT_MESSAGE,
    DUPLICATE_SIGNUP_MESSAGE,
    INVALID_ACTION_MESSAGE,
    AuthAction,
    parse_auth_action,
)

logger = logging.getLogger(__name__)

PROVIDER_UNAVAILABLE_MESSAGE: Final[str] = "認証サーバーに接続できませんでした。時間をおいて再度お試しください。"
LOGIN_FAILED_MESSAGE: Final[str] = "ログインに失敗しました。"
SIGNUP_FAILED_MESSAGE: Final[str] = "登録に失敗しました。"


@require_http_methods([RequestMethod.GET, RequestMethod.POST])
def login(request: HttpRequest) -> HttpResponse:
    """ログイン/新規登録ビュー。

    GETリクエスト: フォームを表示する。
    POSTリクエスト: ``_action`` に応じてログインまたは新規登録を行う。

    Args:
        request: HTTPリクエスト。

    Returns:
        フォームのレンダリング結果、またはログイン成功時のリダイレクト。
    """
    context = resolve_session(request)
    if context.is_authenticated:
        return context.finalize(redirect("tasks:index"))

    if request.method == RequestMethod.POST:
        response = _handle_credentials(request, context)
    else:
        response = _render_login(request, CredentialsForm())

    return context.finalize(response)


def _handle_credentials(request: HttpRequest, context: SessionContext) -> HttpResponse:
    action = parse_auth_action(request.POST.get(ACTION_FIELD))
    form = CredentialsForm(request.POST)

    if action == AuthAction.UNRECOGNIZED:
        return _render_login(request, form, error=INVALID_ACTION_MESSAGE, status=HTTPStatus.BAD_REQUEST)

    if not form.is_valid():
        return _render_login(request, form, status=HTTPStatus.BAD_REQUEST)

    if action == AuthAction.LOGIN:
        return _sign_in(request, context, form)
    return _sign_up(request, context, form)


def _sign_in(request: HttpRequest, context: SessionContext, form: CredentialsForm) -> HttpResponse:
    email = form.cleaned_data["email"]
    try:
        auth_response = context.client.auth.sign_in_with_password(
            {"email": email, "password": form.cleaned_data["password"]}
        )
    except AuthError as exc:
        logger.info("ログインに失敗しました: email=%s, error=%s", email, exc.message)
        return _render_login(request, form, error=exc.message)
    except httpx.HTTPError as exc:
        logger.error("認証サーバーへの接続に失敗しました: error=%s", exc)
        return _render_login(request, form, error=PROVIDER_UNAVAILABLE_MESSAGE)

    if auth_response.session is None:
        return _render_login(request, form, error=LOGIN_FAILED_MESSAGE)

    logger.info("ログインしました: user_id=%s", auth_response.user.id if auth_response.user else None)
    return redirect("tasks:index")


def _sign_up(request: HttpRequest, context: SessionContext, form: CredentialsForm) -> HttpResponse:
    email = form.cleaned_data["email"]
    try:
        auth_response = context.client.auth.sign_up(
            {
                "email": email,
                "password": form.cleaned_data["password"],
                "options": {
                    "email_redirect_to": request.build_absolute_uri(reverse("accounts:auth_callback")),
                },
            }
        )
    except AuthError as exc:
        logger.info("新規登録に失敗しました: email=%s, error=%s", email, exc.message)
        message = DUPLICATE_SIGNUP_MESSAGE if _is_duplicate_registration(exc) else exc.message
        return _render_login(request, form, error=message)
    except httpx.HTTPError as exc:
        logger.error("認証サーバーへの接続に失敗しました: error=%s", exc)
        return _render_login(request, form, error=PROVIDER_UNAVAILABLE_MESSAGE)

    if auth_response.session is not None:
        logger.info("新規登録しログインしました: user_id=%s", auth_response.user.id if auth_response.user else None)
        return redirect("tasks:index")

    if auth_response.user is not None:
        # メール確認が必要な場合はセッションが発行されない
        logger.info("確認メールを送信しました: user_id=%s", auth_response.user.id)
        return _render_login(request, CredentialsForm(initial={"email": email}), message=CONFIRMATION_SENT_MESSAGE)

    return _render_login(request, form, error=SIGNUP_FAILED_MESSAGE)


def _is_duplicate_registration(exc: AuthError) -> bool:
    """登録済みメールアドレスによるエラーか判定する。"""
    if getattr(exc, "code", None) == "user_already_exists":
        return True
    return "already registered" in (exc.message or "").lower()


def _render_login(
    request: HttpRequest,
    form: CredentialsForm,
    *,
    error: str | None = None,
    message: str | None = None,
    status: HTTPStatus = HTTPStatus.OK,
) -> HttpResponse:
    return render(
        request,
        "accounts/login.html",
        {"form": form, "error": error, "message": message},
        status=status,
    )


@require_http_methods([RequestMethod.GET])
def auth_callback(request: HttpRequest) -> HttpResponse:
    """確認メールのリンクから渡されたワンタイムコードをセッションに交換する。

    交換に失敗してもエラーは表示せず、登録完了画面へリダイレクトする。
    コードやセッションの内容は描画しない。

    Args:
        request: HTTPリクエスト。

    Returns:
        登録完了画面へのリダイレクト。
    """
    exchange = create_provider_exchange(request)

    code = request.GET.get("code")
    if code:
        try:
            exchange.client.auth.exchange_code_for_session({"auth_code": code})
        except (AuthError, httpx.HTTPError) as exc:
            logger.warning("コードとセッションの交換に失敗しました: error=%s", exc)

    return exchange.finalize(redirect("accounts:confirmation"))


@require_http_methods([RequestMethod.GET, RequestMethod.HEAD])
def confirmation(request: HttpRequest) -> HttpResponse:
    """登録完了画面を表示する。

    Args:
        request: HTTPリクエスト。

    Returns:
        登録完了画面のHttpResponse。
    """
    return render(request, "accounts/confirmation.html")
