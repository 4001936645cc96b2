"""
Celery application configuration.

Background jobs for the Rigel backend: the monthly depreciation run and
any future scheduled postings.

Usage:
    # Start worker
    celery -A rigel_backend worker -l INFO

    # Start beat scheduler (periodic tasks)
    celery -A rigel_backend beat -l INFO
"""
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "rigel_backend.settings")

app = Celery("rigel_backend")

# Load config from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
