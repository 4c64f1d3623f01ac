"""
WSGI config for coliving project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'coliving.settings')

application = get_wsgi_application()
