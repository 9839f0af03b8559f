from pathlib import Path
import os
from dotenv import load_dotenv
from django.core.exceptions import ImproperlyConfigured

# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def env(name: str, default=None, *, required: bool = False):
    val = os.getenv(name, default)
    if required and (val is None or (isinstance(val, str) and val.strip() == "")):
        raise ImproperlyConfigured(f"Missing required environment variable: {name}")
    return val

def env_bool(name: str, default: bool = False) -> bool:
    return str(os.getenv(name, str(default))).lower() in {"1", "true", "yes", "on"}

def env_size(name: str, default: str) -> tuple[int, int]:
    """Parse a WIDTHxHEIGHT value such as "1280x720"."""
    raw = env(name, default)
    try:
        width, height = (int(part) for part in raw.lower().split("x", 1))
    except ValueError:
        raise ImproperlyConfigured(f"{name} must look like WIDTHxHEIGHT, got {raw!r}")
    return width, height

# -----------------------------------------------------
# Paths & basics
# -----------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

DEBUG = env_bool("DEBUG", False)

# In production (DEBUG=False) you must set a strong secret in .env
SECRET_KEY = env("DJANGO_SECRET_KEY", "dev-only-secret-key-change-me", required=not DEBUG)

# Keep hosts explicit by default
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost").split(",") if h.strip()]

# -----------------------------------------------------
# Applications
# -----------------------------------------------------
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",

    # Local
    "videos",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "transcoder.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "transcoder.wsgi.application"

# -----------------------------------------------------
# Database (Postgres if DB_* env vars set, else SQLite)
# -----------------------------------------------------
if os.getenv("DB_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": env("DB_NAME", "transcoder"),
            "USER": env("DB_USER", "transcoder"),
            "PASSWORD": env("DB_PASSWORD", ""),
            "HOST": env("DB_HOST", "127.0.0.1"),
            "PORT": env("DB_PORT", "5432"),
            "CONN_MAX_AGE": int(env("DB_CONN_MAX_AGE", "60")),  # keep-alive
            "OPTIONS": {
                **({"sslmode": os.getenv("DB_SSLMODE")} if os.getenv("DB_SSLMODE") else {})
            },
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# -----------------------------------------------------
# Password validation
# -----------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# -----------------------------------------------------
# Internationalization
# -----------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# -----------------------------------------------------
# Django REST Framework
# -----------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
        *(["rest_framework.renderers.BrowsableAPIRenderer"] if DEBUG else []),
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
}

# -----------------------------------------------------
# Logging
# -----------------------------------------------------
LOG_LEVEL = env("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(levelname)s:%(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        # boto chatter drowns the pipeline log at INFO
        "botocore": {"level": "WARNING"},
        "s3transfer": {"level": "WARNING"},
    },
}

# -----------------------------------------------------
# Celery / Redis
# -----------------------------------------------------
CELERY_BROKER_URL = env("CELERY_BROKER_URL", "redis://127.0.0.1:6379/0")
CELERY_RESULT_BACKEND = env("CELERY_RESULT_BACKEND", "redis://127.0.0.1:6379/0")
CELERY_TASK_TRACK_STARTED = True
CELERY_TASK_TIME_LIMIT = int(env("CELERY_TASK_TIME_LIMIT", str(60 * 15)))  # seconds

# -----------------------------------------------------
# Default PK type
# -----------------------------------------------------
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------------------------------
# S3 / MinIO (env-driven; no hardcoded secrets)
# -----------------------------------------------------
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL") or "http://127.0.0.1:9000"  # fine for local
S3_PUBLIC_ENDPOINT = os.getenv("S3_PUBLIC_ENDPOINT", S3_ENDPOINT_URL)
S3_REGION = os.getenv("S3_REGION", "us-east-1")
S3_ACCESS_KEY = os.getenv("S3_ACCESS_KEY")          # set in .env for local
S3_SECRET_KEY = os.getenv("S3_SECRET_KEY")          # set in .env for local
# Canned ACL applied to published objects. Leave empty when a bucket policy
# grants public read (MinIO, AWS buckets with BucketOwnerEnforced).
S3_PUBLIC_ACL = env("S3_PUBLIC_ACL", "")

RAW_VIDEO_BUCKET = env("RAW_VIDEO_BUCKET", "raw-videos")
PROCESSED_VIDEO_BUCKET = env("PROCESSED_VIDEO_BUCKET", "processed-videos")
THUMBNAIL_BUCKET = env("THUMBNAIL_BUCKET", "video-thumbnails")

# -----------------------------------------------------
# Local staging
# -----------------------------------------------------
RAW_VIDEO_DIR = Path(env("RAW_VIDEO_DIR", str(BASE_DIR / "raw-videos")))
PROCESSED_VIDEO_DIR = Path(env("PROCESSED_VIDEO_DIR", str(BASE_DIR / "processed-videos")))
THUMBNAIL_DIR = Path(env("THUMBNAIL_DIR", str(BASE_DIR / "thumbnails")))

# -----------------------------------------------------
# ffmpeg / pipeline
# -----------------------------------------------------
FFMPEG_BINARY = env("FFMPEG_BINARY", "ffmpeg")
FFPROBE_BINARY = env("FFPROBE_BINARY", "ffprobe")
# Unset means no limit; CELERY_TASK_TIME_LIMIT still applies to queued runs
FFMPEG_TIMEOUT_SECONDS = float(env("FFMPEG_TIMEOUT_SECONDS")) if env("FFMPEG_TIMEOUT_SECONDS") else None

THUMBNAIL_OFFSET_SECONDS = float(env("THUMBNAIL_OFFSET_SECONDS", "3"))
THUMBNAIL_MAX_SIZE = env_size("THUMBNAIL_MAX_SIZE", "1280x720")
MAX_OUTPUT_HEIGHT = int(env("MAX_OUTPUT_HEIGHT", "720"))
VIDEO_CODEC = env("VIDEO_CODEC", "libx264")
PIXEL_FORMAT = env("PIXEL_FORMAT", "yuv420p")
VIDEO_PRESET = env("VIDEO_PRESET", "veryfast")
VIDEO_CRF = int(env("VIDEO_CRF", "23"))
