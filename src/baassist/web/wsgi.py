"""WSGI entry point for the baassist web API."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "baassist.web.settings")

application = get_wsgi_application()
