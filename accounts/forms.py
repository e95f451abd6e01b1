"""ログイン/新規登録フォーム。

資格情報の検証はプロバイダーに任せ、ここでは入力の有無と形式のみ確認する。
"""

from django import forms


class CredentialsForm(forms.Form):
    """メールアドレスとパスワードの入力フォーム。

    ログインと新規登録の両方で使用する（どちらを実行するかは ``_action`` で決まる）。
    """

    email = forms.EmailField(
        label="メールアドレス",
        widget=forms.EmailInput(
            attrs={
                "class": "form-control",
                "placeholder": "you@example.com",
                "autocomplete": "email",
            }
        ),
    )

    password = forms.CharField(
        label="パスワード",
        strip=False,
        widget=forms.PasswordInput(
            attrs={
                "class": "form-control",
                "placeholder": "パスワード",
                "autocomplete": "current-password",
            }
        ),
    )
