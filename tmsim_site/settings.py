"""
Django settings for running the Turing machine simulator app.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'tmsim-development-key')

DEBUG = os.environ.get('DJANGO_DEBUG', '1') == '1'

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'tmsim',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'tmsim_site.urls'

WSGI_APPLICATION = 'tmsim_site.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True

# Simulator settings, see tmsim/conf.py for the defaults
TMSIM = {
    'STEP_BATCH_NODES': 10,
    'RUN_STEP_DELAY': 0.7,
    'GRAPH_MIN_NODES': 50,
    'MAX_GRAPH_NODES': 5000,
    'MAX_RUN_STEPS': 1000,
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'tmsim': {
            'handlers': ['console'],
            'level': os.environ.get('TMSIM_LOG_LEVEL', 'WARNING'),
        },
    },
}
