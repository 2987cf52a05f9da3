"""
Celery application for the storefront backend.

DJANGO_SETTINGS_MODULE is set before the app is created so Celery reads
its configuration from the Django settings (``CELERY_`` prefix).
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("storefront")

# Read CELERY_* settings from Django
app.config_from_object("django.conf:settings", namespace="CELERY")

# Discover tasks.py in every installed app
app.autodiscover_tasks()
