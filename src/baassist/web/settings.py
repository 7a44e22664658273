"""Django settings for the baassist web API."""

import os

from django.core.management.utils import get_random_secret_key


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


SECRET_KEY = os.getenv("BAASSIST_SECRET_KEY") or get_random_secret_key()

DEBUG = os.getenv("BAASSIST_DEBUG", "false").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = _env_list("BAASSIST_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "corsheaders",
    "baassist.web.api",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "baassist.web.urls"

WSGI_APPLICATION = "baassist.web.wsgi.application"

# No persistence: requests are independent and nothing is stored.
DATABASES = {}

USE_TZ = True

# No authentication; the API is meant for local use behind the UI.
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
}

CORS_ALLOWED_ORIGINS = _env_list(
    "BAASSIST_CORS_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
)

DATA_UPLOAD_MAX_MEMORY_SIZE = 10485760  # 10MB

# Logging goes through baassist.core.logging, configured in ApiConfig.ready().
LOGGING_CONFIG = None
