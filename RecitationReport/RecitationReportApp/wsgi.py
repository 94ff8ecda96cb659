"""WSGI entry point for the recitation report service."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'RecitationReportApp.settings')

application = get_wsgi_application()
