"""タスク画面のフォーム定義。

タスクの作成・タイトル編集に使用するフォームを提供する。
"""

from django import forms

from .params import TITLE_MAX_LENGTH


class TaskForm(forms.Form):
    """タスクの作成フォーム。

    Note:
        ラベルは空文字列に設定されており、プレースホルダーで代替される。
    """

    title = forms.CharField(
        max_length=TITLE_MAX_LENGTH,
        label="",
        widget=forms.TextInput(
            attrs={
                "class": "form-control",
                "placeholder": "新しいタスクを入力...",
                "required": True,
            }
        ),
    )


class EditTaskForm(forms.Form):
    """タスクのタイトル編集フォーム。"""

    id = forms.CharField(widget=forms.HiddenInput)
    title = forms.CharField(
        max_length=TITLE_MAX_LENGTH,
        label="",
        widget=forms.TextInput(
            attrs={
                "class": "form-control form-control-sm",
                "required": True,
            }
        ),
    )
