"""accountsアプリケーションのURL設定。

ユーザー認証関連のエンドポイントをビューにマッピングする。

URLパターン:
    - 'login/': ログイン/新規登録
    - 'auth/callback/': 確認メールのリンクから戻ってくるコールバック
    - 'auth/confirmation/': 登録完了画面
"""

from django.urls import path

from . import views

app_name = "accounts"

urlpatterns = [
    path("login/", views.login, name="login"),
    path("auth/callback/", views.auth_callback, name="auth_callback"),
    path("auth/confirmation/", views.confirmation, name="confirmation"),
]
