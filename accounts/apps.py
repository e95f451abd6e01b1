"""accountsアプリケーションの設定。"""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """accountsアプリケーションの設定クラス。"""

    name = "accounts"
