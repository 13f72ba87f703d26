"""
WSGI config for the clinic queue project.

It exposes the WSGI callable as a module-level variable named ``application``.
Realtime push is only available through the ASGI entrypoint.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinicqueue.settings')

application = get_wsgi_application()
