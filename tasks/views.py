"""タスク画面のビュー。

GETはローダー（セッション解決 → 一覧取得 → 描画）、POSTはアクション
（セッション解決 → ``_action`` に応じた1件の書き込み → 一覧へリダイレクト）として動く。
すべてのレスポンスは ``SessionContext.finalize`` を通し、セッションCookieの更新を反映する。
"""

import logging
from http import HTTPStatus
from typing import Final

import httpx
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods
from supabase import PostgrestAPIError

from django_tasks.auth import (
    NotAuthenticated,
    SessionContext,
    get_authenticated_user_id,
    resolve_session,
)
from shared.enums import RequestMethod

from . import queries, services
from .forms import EditTaskForm, TaskForm
from .params import ACTION_FIELD, TaskAction, parse_task_action

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED_MESSAGE: Final[str] = "ログインが必要です。"
TITLE_REQUIRED_MESSAGE: Final[str] = "タスクを入力してください。"


@require_http_methods([RequestMethod.GET, RequestMethod.POST])
def index(request: HttpRequest) -> HttpResponse:
    """タスク一覧画面を表示し、フォームからの操作を受け付ける。

    Args:
        request: HTTPリクエストオブジェクト。

    Returns:
        GET: 一覧画面。未ログイン時は案内画面。
        POST: 成功時は一覧へのリダイレクト。未ログイン時は401。
    """
    context = resolve_session(request)

    if request.method == RequestMethod.POST:
        response = _handle_action(request, context)
    else:
        response = _render_index(request, context, editing_id=request.GET.get("edit"))

    return context.finalize(response)


def _handle_action(request: HttpRequest, context: SessionContext) -> HttpResponse:
    """``_action`` に応じて書き込みを1件だけ実行する。"""
    action = parse_task_action(request.POST.get(ACTION_FIELD))

    try:
        user_id = get_authenticated_user_id(context)
    except NotAuthenticated:
        logger.info("未ログインの書き込みを拒否しました: action=%s", action)
        return _render_index(
            request,
            context,
            error_message=NOT_AUTHENTICATED_MESSAGE,
            status=HTTPStatus.UNAUTHORIZED,
        )

    if action == TaskAction.CREATE:
        return _create(request, context, user_id)
    if action == TaskAction.TOGGLE:
        return _toggle(request, context, user_id)
    if action == TaskAction.DELETE:
        return _delete(request, context, user_id)
    if action == TaskAction.EDIT:
        return _edit(request, context, user_id)
    if action == TaskAction.LOGOUT:
        services.sign_out(context.exchange)
        logger.info("ログアウトしました: user_id=%s", user_id)
        return redirect("tasks:index")

    # 不明な操作は何もせず成功として扱う
    logger.warning(
        "不明な操作を無視しました: user_id=%s, action=%r",
        user_id,
        request.POST.get(ACTION_FIELD),
    )
    return redirect("tasks:index")


def _create(request: HttpRequest, context: SessionContext, user_id: str) -> HttpResponse:
    form = TaskForm(request.POST)
    if not form.is_valid():
        logger.warning("タスクの作成に失敗しました: errors=%s", form.errors.as_json())
        return _render_index(
            request,
            context,
            form=form,
            form_error_message=TITLE_REQUIRED_MESSAGE,
            status=HTTPStatus.BAD_REQUEST,
        )

    result = services.create_task(
        context.client,
        user_id=user_id,
        title=form.cleaned_data["title"],
    )
    if not result.success:
        logger.warning("タスクの作成に失敗しました: user_id=%s, error=%s", user_id, result.error)
    else:
        logger.info(
            "タスクを作成しました: user_id=%s, id=%s",
            user_id,
            result.task.id if result.task else None,
        )
    return redirect("tasks:index")


def _toggle(request: HttpRequest, context: SessionContext, user_id: str) -> HttpResponse:
    task_id = request.POST.get("id", "")
    result = services.toggle_task(context.client, task_id=task_id, user_id=user_id)
    if not result.success:
        logger.warning(
            "タスクの完了状態更新に失敗しました: user_id=%s, id=%s, error=%s",
            user_id,
            task_id,
            result.error,
        )
    else:
        logger.info(
            "タスクの完了状態を更新しました: user_id=%s, id=%s, completed=%s -> %s",
            user_id,
            task_id,
            result.old_status,
            not result.old_status,
        )
    return redirect("tasks:index")


def _delete(request: HttpRequest, context: SessionContext, user_id: str) -> HttpResponse:
    task_id = request.POST.get("id", "")
    result = services.delete_task(context.client, task_id=task_id, user_id=user_id)
    if not result.success:
        logger.warning(
            "タスクの削除に失敗しました: user_id=%s, id=%s, error=%s",
            user_id,
            task_id,
            result.error,
        )
    else:
        logger.info(
            "タスクを削除しました: user_id=%s, id=%s, 削除件数=%d",
            user_id,
            task_id,
            result.deleted_count,
        )
    return redirect("tasks:index")


def _edit(request: HttpRequest, context: SessionContext, user_id: str) -> HttpResponse:
    form = EditTaskForm(request.POST)
    task_id = request.POST.get("id", "")
    if not form.is_valid():
        return _render_index(
            request,
            context,
            editing_id=task_id,
            edit_form=form,
            edit_error_message=TITLE_REQUIRED_MESSAGE,
            status=HTTPStatus.BAD_REQUEST,
        )

    result = services.edit_task(
        context.client,
        task_id=form.cleaned_data["id"],
        user_id=user_id,
        title=form.cleaned_data["title"],
    )
    if not result.success:
        logger.warning(
            "タスクのタイトル更新に失敗しました: user_id=%s, id=%s, error=%s",
            user_id,
            task_id,
            result.error,
        )
        return _render_index(
            request,
            context,
            editing_id=task_id,
            edit_form=form,
            edit_error_message=result.error,
            status=HTTPStatus.BAD_REQUEST,
        )

    logger.info("タスクのタイトルを更新しました: user_id=%s, id=%s", user_id, task_id)
    return redirect("tasks:index")


def _render_index(
    request: HttpRequest,
    context: SessionContext,
    *,
    form: TaskForm | None = None,
    form_error_message: str | None = None,
    editing_id: str | None = None,
    edit_form: EditTaskForm | None = None,
    edit_error_message: str | None = None,
    error_message: str | None = None,
    status: HTTPStatus = HTTPStatus.OK,
) -> HttpResponse:
    """一覧画面を描画する。

    未ログイン時はタスクを問い合わせず、案内画面を表示する。
    一覧の取得に失敗した場合は警告を記録し、空の一覧として表示する。
    editing_id が自分のタスクを指す場合、その行を編集フォームとして表示する。
    指さない場合、edit_error_message は画面上部に表示する。

    Args:
        request: HTTPリクエストオブジェクト。
        context: 解決済みのセッションコンテキスト。
        form: 作成フォーム。省略時は空のフォーム。
        form_error_message: 作成フォームのエラー表示メッセージ。
        editing_id: 編集中のタスクID。
        edit_form: 編集フォーム。省略時は対象タスクのタイトルで初期化する。
        edit_error_message: 編集フォームのエラー表示メッセージ。
        error_message: 画面上部に表示するメッセージ。
        status: 返却するHTTPステータス。

    Returns:
        レンダリングされた一覧画面のHttpResponse。
    """
    user = context.user
    try:
        tasks = queries.list_tasks(context.client, user_id=user.id if user else None)
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        logger.warning(
            "タスク一覧の取得に失敗しました: user_id=%s, error=%s",
            user.id if user else None,
            exc,
        )
        tasks = []

    editing_task = next((task for task in tasks if task.id == editing_id), None)
    if editing_task is None:
        error_message = error_message or edit_error_message
    elif edit_form is None:
        edit_form = EditTaskForm(initial={"id": editing_task.id, "title": editing_task.title})

    return render(
        request,
        "tasks/index.html",
        {
            "user": user,
            "tasks": tasks,
            "form": form or TaskForm(),
            "form_error_message": form_error_message,
            "editing_id": editing_task.id if editing_task else None,
            "edit_form": edit_form if editing_task else None,
            "edit_error_message": edit_error_message if editing_task else None,
            "error_message": error_message,
        },
        status=status,
    )
