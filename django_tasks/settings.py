"""django_tasksプロジェクトの設定。

環境変数（必要に応じて .env ファイル）から設定を読み込む。
Supabase への接続情報が欠けている場合は起動時に失敗させる。
"""

import os
from pathlib import Path
from typing import Final

from django.core.exceptions import ImproperlyConfigured
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# 既に環境に設定されている値を優先する
load_dotenv(os.getenv("ENV_FILE", BASE_DIR / ".env"), override=False)

REQUIRED_ENV_VARS: Final[tuple[str, ...]] = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
)


def _require_env_vars(names: tuple[str, ...]) -> None:
    """必須の環境変数がすべて設定されているか確認する。

    Args:
        names: 確認する環境変数名。

    Raises:
        ImproperlyConfigured: 未設定の環境変数がある場合。
    """
    missing = [name for name in names if not os.getenv(name)]
    if missing:
        raise ImproperlyConfigured(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Set them in your environment or .env file."
        )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


_require_env_vars(REQUIRED_ENV_VARS)

# =============================================================================
# Django
# =============================================================================

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-dev-only-change-me")
DEBUG = _env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.staticfiles",
    "tasks",
    "accounts",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "django_tasks.urls"
WSGI_APPLICATION = "django_tasks.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
            ],
        },
    },
]

# タスクとユーザーはすべて Supabase 側に保存する
DATABASES: dict[str, dict[str, object]] = {}

LANGUAGE_CODE = "ja"
TIME_ZONE = "Asia/Tokyo"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

CSRF_COOKIE_SECURE = not DEBUG

# =============================================================================
# Supabase
# =============================================================================

SUPABASE_URL = os.environ["SUPABASE_URL"]
SUPABASE_ANON_KEY = os.environ["SUPABASE_ANON_KEY"]
SUPABASE_CLIENT_FACTORY = os.getenv("SUPABASE_CLIENT_FACTORY", "supabase.create_client")
SUPABASE_AUTH_COOKIE_MAX_AGE = 60 * 60 * 24 * 400
SUPABASE_AUTH_COOKIE_SECURE = not DEBUG

# =============================================================================
# ロギング
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "django_tasks": {"level": LOG_LEVEL},
        "tasks": {"level": LOG_LEVEL},
        "accounts": {"level": LOG_LEVEL},
    },
}
