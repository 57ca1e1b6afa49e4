"""Django settings for the threadpress blogging engine.

Environment-driven configuration for the database, session cookies, logging,
and the signup/anonymous-comment feature switches.
"""
import os
from datetime import timedelta
from pathlib import Path
from urllib.parse import urlparse

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def _get_env(name: str, default: str | None = None) -> str | None:
    """Read an environment variable with an optional fallback."""
    return os.environ.get(name, default)


def _get_flag(name: str, default: str) -> bool:
    """Read a ``True``/``False`` environment switch."""
    return _get_env(name, default) == "True"


def _parse_database_url(url: str) -> dict:
    """Parse a PostgreSQL or SQLite DATABASE_URL into a Django DATABASES entry."""
    parsed = urlparse(url)
    if parsed.scheme == "sqlite":
        # sqlite:///relative.db or sqlite:////absolute/path.db
        name = parsed.path[1:] if parsed.path.startswith("/") else parsed.path
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": name or str(BASE_DIR / "db.sqlite3"),
        }
    if parsed.scheme not in ("postgres", "postgresql"):
        raise ImproperlyConfigured(f"Unsupported DATABASE_URL scheme: {parsed.scheme}")
    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": parsed.path.lstrip("/"),
        "USER": parsed.username,
        "PASSWORD": parsed.password,
        "HOST": parsed.hostname,
        "PORT": parsed.port or "5432",
    }


SECRET_KEY = _get_env("SECRET_KEY", "dev-secret-key-change-me")
DEBUG = _get_flag("DEBUG", "True")
if not DEBUG and SECRET_KEY in ("change-me", "dev-secret-key-change-me"):
    raise ImproperlyConfigured("SECRET_KEY must be set in production")
ALLOWED_HOSTS = [
    h.strip()
    for h in _get_env("ALLOWED_HOSTS", "localhost,127.0.0.1,0.0.0.0").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "core",
    "access_control",
    "authentication",
    "articles",
    "comments",
    "scripts",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Resolves the session cookie into request.user / request.auth_context.
    "core.middleware.SessionCookieMiddleware",
]

ROOT_URLCONF = "core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "core.wsgi.application"

DATABASE_URL = _get_env("DATABASE_URL")
if DATABASE_URL:
    DATABASES = {"default": _parse_database_url(DATABASE_URL)}
elif _get_env("POSTGRES_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": _get_env("POSTGRES_DB", "threadpress"),
            "USER": _get_env("POSTGRES_USER", "threadpress"),
            "PASSWORD": _get_env("POSTGRES_PASSWORD", "threadpress"),
            "HOST": _get_env("POSTGRES_HOST"),
            "PORT": _get_env("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": str(BASE_DIR / "db.sqlite3"),
        }
    }

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_USER_MODEL = "authentication.User"

DEBUG_AUTH_ERRORS = _get_flag("DEBUG_AUTH_ERRORS", "False")

# Feature switches.
ALLOW_SIGNUPS = _get_flag("ALLOW_SIGNUPS", "True")
ALLOW_ANONYMOUS_COMMENTS = _get_flag("ALLOW_ANONYMOUS_COMMENTS", "True")

# Opaque session tokens stored in the database and carried in a cookie.
SESSION_TOKEN_COOKIE = _get_env("SESSION_TOKEN_COOKIE", "session")
SESSION_TOKEN_TTL = timedelta(days=int(_get_env("SESSION_TOKEN_TTL_DAYS", "30")))
SESSION_TOKEN_COOKIE_SECURE = _get_flag("SESSION_TOKEN_COOKIE_SECURE", "False")
SESSION_TOKEN_COOKIE_DOMAIN = _get_env("SESSION_TOKEN_COOKIE_DOMAIN") or None

LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django.db.backends": {
            "level": "WARNING",
        },
    },
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ["core.authentication.MiddlewareUserAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": [],
    "EXCEPTION_HANDLER": "core.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "threadpress API",
    "DESCRIPTION": (
        "OpenAPI schema for the threadpress blogging engine: articles, "
        "threaded comments, group permissions and cookie sessions."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SERVE_PUBLIC": True,
    "APPEND_COMPONENTS": {
        "securitySchemes": {
            "sessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": SESSION_TOKEN_COOKIE,
            }
        }
    },
    "SECURITY": [{"sessionCookie": []}],
}
