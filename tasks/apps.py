"""タスクアプリケーションの設定。

Djangoアプリケーションの設定クラスを定義する。
"""

from django.apps import AppConfig


class TasksConfig(AppConfig):
    """タスクアプリケーションの設定クラス。

    Attributes:
        name: アプリケーション名。
    """

    name = "tasks"
