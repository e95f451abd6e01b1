"""セッション解決のテスト。"""

from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase

from ..auth import NotAuthenticated, get_authenticated_user_id, resolve_session
from .fakes import AUTH_STORAGE_KEY, backend


class ResolveSessionTests(SimpleTestCase):
    """resolve_session関数のテストケース。"""

    def setUp(self):
        backend.reset()
        self.user = backend.create_user("user@example.com")
        self.factory = RequestFactory()

    def _request_with_token(self, token: str):
        request = self.factory.get("/")
        request.COOKIES[AUTH_STORAGE_KEY] = token
        return request

    def test_no_cookie_is_anonymous(self):
        """Cookieが無い場合は未ログインになることを確認する。"""
        context = resolve_session(self.factory.get("/"))
        self.assertFalse(context.is_authenticated)
        self.assertIsNone(context.user)

    def test_valid_session_resolves_user(self):
        """有効なセッションからユーザーIDが得られることを確認する。"""
        session = backend.issue_session(self.user)
        context = resolve_session(self._request_with_token(session.access_token))

        self.assertTrue(context.is_authenticated)
        assert context.user is not None
        self.assertEqual(context.user.id, self.user.id)
        self.assertEqual(context.user.email, "user@example.com")

    def test_valid_session_authorizes_table_client(self):
        """テーブル操作用クライアントにアクセストークンが渡されることを確認する。"""
        session = backend.issue_session(self.user)
        resolve_session(self._request_with_token(session.access_token))
        self.assertEqual(backend.postgrest_tokens, [session.access_token])

    def test_unknown_token_is_anonymous(self):
        """無効なトークンは未ログインとして扱われることを確認する。"""
        context = resolve_session(self._request_with_token("expired"))
        self.assertFalse(context.is_authenticated)

    def test_provider_failure_is_anonymous(self):
        """プロバイダーに到達できない場合も未ログインとして扱われることを確認する。"""
        session = backend.issue_session(self.user)
        backend.auth_unavailable = True

        with self.assertLogs("django_tasks.auth", level="WARNING"):
            context = resolve_session(self._request_with_token(session.access_token))

        self.assertFalse(context.is_authenticated)

    def test_refreshed_session_is_written_to_response(self):
        """セッション更新時のCookie変更がfinalizeでレスポンスに反映されることを確認する。"""
        session = backend.issue_session(self.user)
        backend.rotate_session_on_read = True

        context = resolve_session(self._request_with_token(session.access_token))
        response = context.finalize(HttpResponse())

        new_token = response.cookies[AUTH_STORAGE_KEY].value
        self.assertNotEqual(new_token, session.access_token)
        self.assertIn(new_token, backend.sessions)


class GetAuthenticatedUserIdTests(SimpleTestCase):
    """get_authenticated_user_id関数のテストケース。"""

    def setUp(self):
        backend.reset()

    def test_raises_when_anonymous(self):
        """未ログイン時に例外が送出されることを確認する。"""
        context = resolve_session(RequestFactory().get("/"))
        with self.assertRaises(NotAuthenticated):
            get_authenticated_user_id(context)

    def test_returns_user_id(self):
        """ログイン時にユーザーIDが返されることを確認する。"""
        user = backend.create_user("user@example.com")
        session = backend.issue_session(user)
        request = RequestFactory().get("/")
        request.COOKIES[AUTH_STORAGE_KEY] = session.access_token

        context = resolve_session(request)

        self.assertEqual(get_authenticated_user_id(context), user.id)
