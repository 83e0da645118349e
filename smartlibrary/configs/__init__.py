#!/usr/bin/env python

"""
    Configurations for SmartLibrary

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import os


# Determine environment
TESTING = os.getenv("TESTING", "false").lower() == "true"

# API server configuration
HOST = os.environ.get('SMARTLIB_HOST', 'localhost')
PORT = int(os.environ.get('SMARTLIB_PORT', 5000))
WORKERS = int(os.environ.get('SMARTLIB_WORKERS', 1))
DEBUG = bool(int(os.environ.get('SMARTLIB_DEBUG', 0)))
LOG_LEVEL = os.environ.get('SMARTLIB_LOG_LEVEL', 'info')
CORS_ORIGINS = [
    origin.strip() for origin in
    os.environ.get('SMARTLIB_CORS_ORIGINS', '*').split(',')
    if origin.strip()
]

OPTIONS = {
    'host': HOST,
    'port': PORT,
    'log_level': LOG_LEVEL,
    'reload': DEBUG,
    'workers': WORKERS,
}

# Seconds a borrow or return waits for the item lock before giving up
LOCK_TIMEOUT = float(os.environ.get('SMARTLIB_LOCK_TIMEOUT', 10))

DB_CONFIG = {
    'user': os.environ.get('PGUSER', 'postgres'),
    'password': os.environ.get('PGPASSWORD'),
    'host': os.environ.get('PGHOST', 'localhost'),
    'port': int(os.environ.get('PGPORT', '5432')),
    'dbname': os.environ.get('PGDATABASE', 'smartlibrary'),
}

# Database configuration
DB_URI = os.environ.get('SMARTLIB_DB_URI') or (
    "sqlite:///:memory:" if TESTING else
    'postgresql+psycopg2://{user}:{password}@{host}:{port}/{dbname}'.format(**DB_CONFIG)
)

# S3 compatible storage for cover images
S3_CONFIG = {
    'endpoint': os.environ.get('S3_ENDPOINT'),
    'access_key': os.environ.get('S3_ACCESS_KEY'),
    'secret_key': os.environ.get('S3_SECRET_KEY'),
    'secure': os.environ.get('S3_SECURE', 'false').lower() == 'true',
    'bucket': os.environ.get('S3_COVERS_BUCKET', 'smart-library-covers'),
    'public_url': os.environ.get('S3_PUBLIC_URL'),
}

__all__ = [
    'HOST', 'PORT', 'DEBUG', 'LOG_LEVEL', 'OPTIONS', 'CORS_ORIGINS',
    'LOCK_TIMEOUT', 'DB_URI', 'DB_CONFIG', 'S3_CONFIG', 'TESTING'
]
