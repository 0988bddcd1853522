"""
WSGI config for the offchain resolver.

Named export for Gunicorn: config.wsgi:offchainResolver
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

offchainResolver = get_wsgi_application()
