"""
Django settings for the foodbank project.
"""
from pathlib import Path
import os
import sys


# --------------------------- helpers ---------------------------
def env_bool(key: str, default: bool = False) -> bool:
    v = os.environ.get(key)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")

def env_csv(key: str, default: str = "") -> list[str]:
    raw = os.environ.get(key, default)
    return [x.strip() for x in raw.split(",") if x.strip()]

def env_int(key: str, default: int) -> int:
    try:
        return int(os.environ.get(key, "").strip())
    except ValueError:
        return default


# --------------------------- base & .env ---------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

from dotenv import load_dotenv  # noqa: E402

load_dotenv(BASE_DIR / ".env")

# --------------------------- security/debug ---------------------------
SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY",
    "django-insecure-5v!q0d8r#foodbank-dev-only-k2m@x7u1b$e9w",
)

IS_RUNSERVER = any(arg in sys.argv for arg in ("runserver", "runserver_plus"))
DEBUG = env_bool("DEBUG", IS_RUNSERVER)
TESTING = "pytest" in sys.modules or (len(sys.argv) > 1 and sys.argv[1] == "test")

ALLOWED_HOSTS = env_csv("ALLOWED_HOSTS", "localhost,127.0.0.1,0.0.0.0")
if TESTING and "testserver" not in ALLOWED_HOSTS:
    ALLOWED_HOSTS = [*ALLOWED_HOSTS, "testserver"]

# ---- SSL (tighten automatically when not DEBUG) ----
FORCE_SSL = env_bool("FORCE_SSL", False)
SECURE_SSL_REDIRECT = FORCE_SSL and not TESTING
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
USE_X_FORWARDED_HOST = True

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

# ---- CORS (browser front end on another origin) ----
CORS_ALLOWED_ORIGINS = env_csv(
    "CORS_ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
)
CORS_ALLOW_ALL_ORIGINS = env_bool("CORS_ALLOW_ALL_ORIGINS", False)
CORS_EXPOSE_HEADERS = ["X-Request-ID"]

# --------------------------- apps ---------------------------
INSTALLED_APPS = [
    "django.contrib.staticfiles",
    "corsheaders",

    # Local apps
    "simulator.apps.SimulatorConfig",
]

# --------------------------- middleware ---------------------------
MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "foodbank.middleware.RequestIDMiddleware",
    "foodbank.middleware.AccessLogMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "foodbank.urls"
WSGI_APPLICATION = "foodbank.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {"debug": DEBUG, "context_processors": []},
    },
]

# --------------------------- database ---------------------------
# Simulation runs are never persisted.
DATABASES: dict = {}

# --------------------------- cache ---------------------------
CACHE_TTL_DEFAULT = env_int("CACHE_TTL_DEFAULT", 60)
REDIS_URL = os.environ.get("REDIS_URL", "")
if REDIS_URL and not TESTING:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "OPTIONS": {"CLIENT_CLASS": "django_redis.client.DefaultClient"},
            "TIMEOUT": CACHE_TTL_DEFAULT,
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "foodbank-local-cache",
            "TIMEOUT": CACHE_TTL_DEFAULT,
        }
    }

# --------------------------- i18n ---------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("TIME_ZONE", "UTC")
USE_I18N = False
USE_TZ = True

# --------------------------- static ---------------------------
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": (
            "django.contrib.staticfiles.storage.StaticFilesStorage"
            if (DEBUG or TESTING)
            else "whitenoise.storage.CompressedManifestStaticFilesStorage"
        )
    },
}
WHITENOISE_AUTOREFRESH = DEBUG

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# --------------------------- simulator ---------------------------
FOODBANK_SIM = {
    # boxes per category below which a full restock batch is delivered
    "RESTOCK_THRESHOLD": env_int("FOODBANK_RESTOCK_THRESHOLD", 10),
    "MAX_SIMULATIONS": env_int("FOODBANK_MAX_SIMULATIONS", 10000),
    "MAX_DAYS": env_int("FOODBANK_MAX_DAYS", 3650),
    "MAX_RESTOCK": env_int("FOODBANK_MAX_RESTOCK", 10_000),
    # days * simulations allowed on the synchronous endpoint
    "SYNC_WORK_LIMIT": env_int("FOODBANK_SYNC_WORK_LIMIT", 2_000_000),
    "JOB_TTL": env_int("FOODBANK_JOB_TTL", 60 * 60),
}

# --------------------------- celery ---------------------------
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "memory://")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND") or None
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", TESTING)
CELERY_TASK_EAGER_PROPAGATES = TESTING
CELERY_TASK_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]

# --------------------------- logging ---------------------------
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "foodbank.logging_filters.RequestIDLogFilter"},
    },
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s [%(name)s] [rid=%(request_id)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "filters": ["request_id"],
            "formatter": "plain",
        },
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "access": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "simulator": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "django.request": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
