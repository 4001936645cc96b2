"""WSGI entry point for the Rigel backend."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "rigel_backend.settings")

application = get_wsgi_application()
