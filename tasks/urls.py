"""タスクアプリケーションのURL設定。

URLパターン:
    - '': タスク一覧（GET）と操作の受け付け（POST）
"""

from django.urls import path

from . import views

app_name = "tasks"

urlpatterns = [
    path("", views.index, name="index"),
]
