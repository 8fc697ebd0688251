# backend/asgi.py
"""
PATH: backend/asgi.py

ASGI entrypoint. The sale gateway bridges the async POS engine onto the ORM,
so this is the preferred server interface.
Defaults to dev settings unless DJANGO_SETTINGS_MODULE is set externally.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()
