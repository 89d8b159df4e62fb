"""
Purpose: Standalone Django bootstrap for the trips app.
What it does:
Configures just enough of Django (one database, one cache, the trips app)
for scripts, workers and tests that use the ORM outside a full project.

Environment (read from .env via python-dotenv):
MATCHING_DB_ENGINE=django.db.backends.sqlite3
MATCHING_DB_NAME=matching.sqlite3
MATCHING_CACHE_BACKEND=django.core.cache.backends.locmem.LocMemCache
MATCHING_POLYLINE_TTL_SECONDS=86400
"""

import os

import django
from django.conf import settings
from dotenv import load_dotenv

load_dotenv()


def setup_django(**overrides) -> None:
    """Idempotent: a second call (or an already configured project) is a no-op."""
    if settings.configured:
        return

    options = dict(
        DATABASES={
            "default": {
                "ENGINE": os.getenv("MATCHING_DB_ENGINE", "django.db.backends.sqlite3"),
                "NAME": os.getenv("MATCHING_DB_NAME", "matching.sqlite3"),
            }
        },
        CACHES={
            "default": {
                "BACKEND": os.getenv("MATCHING_CACHE_BACKEND", "django.core.cache.backends.locmem.LocMemCache"),
                "LOCATION": os.getenv("MATCHING_CACHE_LOCATION", "matching-polylines"),
            }
        },
        INSTALLED_APPS=["trips.apps.TripsConfig"],
        DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
        USE_TZ=True,
        TIME_ZONE="UTC",
        MATCHING_POLYLINE_TTL_SECONDS=int(os.getenv("MATCHING_POLYLINE_TTL_SECONDS", "86400")),
    )
    options.update(overrides)

    settings.configure(**options)
    django.setup()
