"""django_tasksプロジェクトのURL設定。

プロジェクトレベルのURLルーティングを定義する。

URLパターン:
    - '': 認証（ログイン/コールバック/登録完了）
    - '': タスクアプリケーション
"""

import django.urls

urlpatterns = [
    django.urls.path("", django.urls.include("accounts.urls")),
    django.urls.path("", django.urls.include("tasks.urls")),
]
