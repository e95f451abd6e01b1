"""accountsアプリケーションのテスト。

ログイン・新規登録・コールバックのテストを提供する。
"""

from http import HTTPStatus

from django.test import SimpleTestCase
from django.urls import reverse

from accounts.forms import CredentialsForm
from accounts.params import (
    CONFIRMATION_SENT_MESSAGE,
    DUPLICATE_SIGNUP_MESSAGE,
    INVALID_ACTION_MESSAGE,
    AuthAction,
    parse_auth_action,
)
from django_tasks.tests.fakes import AUTH_STORAGE_KEY, CODE_VERIFIER_KEY, backend, sign_in


class ParseAuthActionTest(SimpleTestCase):
    """parse_auth_action関数のテスト。"""

    def test_known_and_unknown_actions(self) -> None:
        self.assertEqual(parse_auth_action("login"), AuthAction.LOGIN)
        self.assertEqual(parse_auth_action(" SIGNUP "), AuthAction.SIGNUP)
        self.assertEqual(parse_auth_action("logout"), AuthAction.UNRECOGNIZED)
        self.assertEqual(parse_auth_action(None), AuthAction.UNRECOGNIZED)


class CredentialsFormTest(SimpleTestCase):
    """CredentialsFormのテスト。"""

    def test_form_valid_with_correct_data(self) -> None:
        form = CredentialsForm(data={"email": "user@example.com", "password": "secret"})
        self.assertTrue(form.is_valid(), form.errors)

    def test_form_invalid_with_bad_email(self) -> None:
        """不正なメールアドレスでフォームが無効になることを確認する。"""
        form = CredentialsForm(data={"email": "not-an-email", "password": "secret"})
        self.assertFalse(form.is_valid())
        self.assertIn("email", form.errors)

    def test_password_is_not_stripped(self) -> None:
        """パスワードの前後空白が保持されることを確認する。"""
        form = CredentialsForm(data={"email": "user@example.com", "password": " secret "})
        self.assertTrue(form.is_valid())
        self.assertEqual(form.cleaned_data["password"], " secret ")


class LoginViewTest(SimpleTestCase):
    """ログインのテスト。"""

    def setUp(self) -> None:
        backend.reset()
        self.user = backend.create_user("user@example.com", "TestPass123!")
        self.login_url = reverse("accounts:login")

    def test_login_page_returns_200(self) -> None:
        response = self.client.get(self.login_url)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertTemplateUsed(response, "accounts/login.html")

    def test_login_success_redirects_home_with_session_cookie(self) -> None:
        """ログイン成功時にセッションCookie付きでホームへリダイレクトされることを確認する。"""
        response = self.client.post(
            self.login_url,
            {"_action": "login", "email": "user@example.com", "password": "TestPass123!"},
        )

        self.assertRedirects(response, reverse("tasks:index"))
        token = response.cookies[AUTH_STORAGE_KEY].value
        self.assertEqual(backend.sessions[token], self.user)

        response = self.client.get(reverse("tasks:index"))
        self.assertEqual(response.context["user"].id, self.user.id)

    def test_login_failure_shows_provider_message(self) -> None:
        """ログイン失敗時にプロバイダーのメッセージがそのまま表示されることを確認する。"""
        response = self.client.post(
            self.login_url,
            {"_action": "login", "email": "user@example.com", "password": "wrong"},
        )

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.context["error"], "Invalid login credentials")
        self.assertContains(response, "Invalid login credentials")
        self.assertContains(response, 'value="user@example.com"')
        self.assertNotIn(AUTH_STORAGE_KEY, response.cookies)

    def test_unconfirmed_email_shows_provider_message(self) -> None:
        backend.create_user("pending@example.com", "TestPass123!", confirmed=False)
        response = self.client.post(
            self.login_url,
            {"_action": "login", "email": "pending@example.com", "password": "TestPass123!"},
        )
        self.assertEqual(response.context["error"], "Email not confirmed")

    def test_missing_fields_do_not_reach_provider(self) -> None:
        """入力不足の場合はプロバイダーを呼ばずにフォームを再表示することを確認する。"""
        response = self.client.post(self.login_url, {"_action": "login", "email": "user@example.com"})

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertIn("password", response.context["form"].errors)
        self.assertEqual(len(backend.sessions), 0)

    def test_unknown_action_shows_error(self) -> None:
        response = self.client.post(
            self.login_url,
            {"_action": "reset", "email": "user@example.com", "password": "TestPass123!"},
        )
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(response.context["error"], INVALID_ACTION_MESSAGE)

    def test_authenticated_user_redirected_from_login(self) -> None:
        """ログイン済みユーザーがリダイレクトされることを確認する。"""
        sign_in(self.client, self.user)
        response = self.client.get(self.login_url)
        self.assertRedirects(response, reverse("tasks:index"))


class SignUpViewTest(SimpleTestCase):
    """新規登録のテスト。"""

    def setUp(self) -> None:
        backend.reset()
        self.login_url = reverse("accounts:login")

    def _signup(self, email: str = "new@example.com"):
        return self.client.post(
            self.login_url,
            {"_action": "signup", "email": email, "password": "TestPass123!"},
        )

    def test_signup_with_confirmation_shows_message(self) -> None:
        """メール確認が必要な場合はリダイレクトせずに案内を表示することを確認する。"""
        backend.autoconfirm = False

        response = self._signup()

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.context["message"], CONFIRMATION_SENT_MESSAGE)
        self.assertIn("new@example.com", backend.users)
        self.assertEqual(backend.last_email_redirect_to, "http://testserver/auth/callback/")
        self.assertEqual(response.cookies[CODE_VERIFIER_KEY].value, "fake-code-verifier")

    def test_signup_without_confirmation_logs_in(self) -> None:
        """メール確認が不要な場合はログインしてホームへリダイレクトされることを確認する。"""
        response = self._signup()

        self.assertRedirects(response, reverse("tasks:index"))
        response = self.client.get(reverse("tasks:index"))
        self.assertEqual(response.context["user"].email, "new@example.com")

    def test_duplicate_signup_shows_friendly_message(self) -> None:
        """登録済みのメールアドレスでは固定メッセージに置き換えられることを確認する。"""
        backend.create_user("new@example.com")

        response = self._signup()

        self.assertEqual(response.context["error"], DUPLICATE_SIGNUP_MESSAGE)
        self.assertNotContains(response, "User already registered")


class AuthCallbackViewTest(SimpleTestCase):
    """コールバックのテスト。"""

    def setUp(self) -> None:
        backend.reset()
        self.user = backend.create_user("new@example.com", confirmed=False)
        self.callback_url = reverse("accounts:auth_callback")

    def test_valid_code_establishes_session(self) -> None:
        """コードがセッションに交換され、登録完了画面へリダイレクトされることを確認する。"""
        code = backend.issue_code(self.user)
        self.client.cookies[CODE_VERIFIER_KEY] = "fake-code-verifier"

        response = self.client.get(self.callback_url, {"code": code})

        self.assertRedirects(response, reverse("accounts:confirmation"))
        token = response.cookies[AUTH_STORAGE_KEY].value
        self.assertEqual(backend.sessions[token], self.user)
        self.assertEqual(response.cookies[CODE_VERIFIER_KEY].value, "")
        self.assertNotIn(code.encode(), response.content)

    def test_invalid_code_still_redirects(self) -> None:
        with self.assertLogs("accounts.views", level="WARNING"):
            response = self.client.get(self.callback_url, {"code": "bogus"})

        self.assertRedirects(response, reverse("accounts:confirmation"))
        self.assertNotIn(AUTH_STORAGE_KEY, response.cookies)

    def test_missing_code_redirects(self) -> None:
        response = self.client.get(self.callback_url)
        self.assertRedirects(response, reverse("accounts:confirmation"))


class ConfirmationViewTest(SimpleTestCase):
    """登録完了画面のテスト。"""

    def test_confirmation_page(self) -> None:
        response = self.client.get(reverse("accounts:confirmation"))
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertTemplateUsed(response, "accounts/confirmation.html")
        self.assertContains(response, reverse("accounts:login"))
