"""
Local development settings.
"""
from .base import *

DEBUG = True
ALLOWED_HOSTS = ["*"]

# Local database: sqlite unless DB_NAME points at a postgres instance
DATABASES = {
    "default": database_from_env("db.sqlite3"),
}

# Add development-only apps
INSTALLED_APPS += [
    "django_extensions",
]

STORAGES = storages_from_env()

# Local email backend
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
