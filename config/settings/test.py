# config/settings/test.py
from .base import *  # noqa

# BB_TEST_DB=postgres keeps the PostgreSQL database from base (row locks are real there).
if os.getenv("BB_TEST_DB", "sqlite") != "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "test.sqlite3",
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["loggers"]["bb_core"]["level"] = "WARNING"
