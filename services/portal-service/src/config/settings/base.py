# services/portal-service/src/config/settings/base.py
"""
Base settings for Portal Service
"""

import os
import sys
from pathlib import Path
from datetime import timedelta
from urllib.parse import urlparse, unquote

BASE_DIR = Path(__file__).resolve().parent.parent.parent
REPO_DIR = BASE_DIR.parent.parent.parent
if str(REPO_DIR) not in sys.path:
    sys.path.insert(0, str(REPO_DIR))

SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
DEBUG = False
ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

SERVICE_NAME = 'portal-service'
SERVICE_VERSION = os.environ.get('SERVICE_VERSION', '1.0.0')
SERVICE_PORT = int(os.environ.get('SERVICE_PORT', 8000))

ROOT_URLCONF = 'config.urls'
WSGI_APPLICATION = 'config.wsgi.application'

DJANGO_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
]

THIRD_PARTY_APPS = [
    'rest_framework',
    'corsheaders',
]

LOCAL_APPS = [
    'apps.core',
    'apps.api',
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'shared.common.middleware.RequestIDMiddleware',
    'shared.common.middleware.FunctionLoggingMiddleware',
]


def _database_from_url(url):
    """Translate DATABASE_URL into a Django DATABASES entry."""
    parsed = urlparse(url)
    if parsed.scheme in ('sqlite', 'sqlite3'):
        return {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': unquote(parsed.path.lstrip('/')) or ':memory:',
        }
    return {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': unquote(parsed.path.lstrip('/')),
        'USER': unquote(parsed.username or ''),
        'PASSWORD': unquote(parsed.password or ''),
        'HOST': parsed.hostname or 'localhost',
        'PORT': str(parsed.port or 5432),
        'CONN_MAX_AGE': 60,
        'OPTIONS': {
            'connect_timeout': 10,
        },
    }


PORTAL_DATABASE_URL = os.environ.get('DATABASE_URL', '')

if PORTAL_DATABASE_URL:
    DATABASES = {'default': _database_from_url(PORTAL_DATABASE_URL)}
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.environ.get('DB_NAME', 'portal_service_db'),
            'USER': os.environ.get('DB_USER', 'portal_service'),
            'PASSWORD': os.environ.get('DB_PASSWORD', 'portal_service_password'),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', '5432'),
            'CONN_MAX_AGE': 60,
            'OPTIONS': {
                'connect_timeout': 10,
            },
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

REDIS_URL = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
REDIS_PASSWORD = os.environ.get('REDIS_PASSWORD', None)

CACHES = {
    'default': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': REDIS_URL,
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            'CONNECTION_POOL_KWARGS': {'max_connections': 50, 'retry_on_timeout': True},
            'PASSWORD': REDIS_PASSWORD,
        },
        'KEY_PREFIX': SERVICE_NAME,
        'TIMEOUT': None,
    },
}

# NATS Configuration (realtime change stream)
NATS_SERVERS = os.environ.get('NATS_SERVERS', 'nats://localhost:4222').split(',')
NATS_USER = os.environ.get('NATS_USER', None)
NATS_PASSWORD = os.environ.get('NATS_PASSWORD', None)
NATS_TOKEN = os.environ.get('NATS_TOKEN', None)

PORTAL_REALTIME_BACKEND = os.environ.get('PORTAL_REALTIME_BACKEND', 'nats')
PORTAL_REALTIME_PREFIX = os.environ.get('PORTAL_REALTIME_PREFIX', 'portal')

# Portal functions
PORTAL_FUNCTIONS_URL = os.environ.get('PORTAL_FUNCTIONS_URL', 'http://localhost:8000')
PORTAL_FUNCTIONS_TIMEOUT = float(os.environ.get('PORTAL_FUNCTIONS_TIMEOUT', 10.0))
PORTAL_ANON_KEY = os.environ.get('PORTAL_ANON_KEY', '')
PORTAL_SERVICE_KEY = os.environ.get('PORTAL_SERVICE_ROLE_KEY', '')
PORTAL_ADMIN_LOOKUP = 'apps.core.services.pilot_service.is_admin_identity'

PORTAL_AUTH = {
    'TIMEOUT': float(os.environ.get('PORTAL_AUTH_TIMEOUT', 5.0)),
    'GRACE_WINDOW': float(os.environ.get('PORTAL_AUTH_GRACE_WINDOW', 0.2)),
    # Stale cached privileges can grant access after a revocation while the
    # identity provider is unreachable
    'ALLOW_CACHED_FALLBACK': os.environ.get('PORTAL_AUTH_ALLOW_CACHED_FALLBACK', 'true').lower() == 'true',
    'IDENTITY_CACHE_KEY': 'pilot_portal_user',
}

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'shared.common.authentication.ServiceKeyAuthentication',
        'shared.common.authentication.JWTAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
    'EXCEPTION_HANDLER': 'shared.common.exceptions.portal_exception_handler',
    'UNAUTHENTICATED_USER': 'django.contrib.auth.models.AnonymousUser',
    'COERCE_DECIMAL_TO_STRING': False,
}

JWT_SETTINGS = {
    'ACCESS_TOKEN_LIFETIME': timedelta(hours=1),
    'ALGORITHM': 'HS256',
    'SIGNING_KEY': os.environ.get('JWT_SECRET_KEY', SECRET_KEY),
    'VERIFYING_KEY': os.environ.get('JWT_SECRET_KEY', SECRET_KEY),
    'ISSUER': 'pilot-portal',
}

CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_HEADERS = ['authorization', 'x-client-info', 'apikey', 'content-type']

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {'standard': {'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'}},
    'handlers': {'console': {'class': 'logging.StreamHandler', 'formatter': 'standard'}},
    'root': {'handlers': ['console'], 'level': 'INFO'},
    'loggers': {
        'django': {'handlers': ['console'], 'level': os.environ.get('DJANGO_LOG_LEVEL', 'INFO'), 'propagate': False},
        'apps': {'handlers': ['console'], 'level': 'DEBUG', 'propagate': False},
        'shared': {'handlers': ['console'], 'level': 'INFO', 'propagate': False},
    },
}
