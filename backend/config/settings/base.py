"""
Base settings for the product catalog.

Values come from the environment or a .env file via python-decouple.
"""

import logging.config

from decouple import Choices, config

from domain.shared.value_objects import SUPPORTED_CURRENCIES

# =============================================================================
# CATALOG
# =============================================================================
CATALOG_ENV = config('CATALOG_ENV', default='dev')

CATALOG_DEFAULT_CURRENCY = config(
    'CATALOG_DEFAULT_CURRENCY',
    default='THB',
    cast=Choices(list(SUPPORTED_CURRENCIES)),
)

# Page sizes for list queries
CATALOG_DEFAULT_PAGE_SIZE = config('CATALOG_DEFAULT_PAGE_SIZE', default=20, cast=int)
CATALOG_MAX_PAGE_SIZE = config('CATALOG_MAX_PAGE_SIZE', default=100, cast=int)

CATALOG_LOW_STOCK_THRESHOLD = config('CATALOG_LOW_STOCK_THRESHOLD', default=10, cast=int)

# Refuse to delete a category while live products are filed under it
CATALOG_BLOCK_DELETE_WITH_PRODUCTS = config(
    'CATALOG_BLOCK_DELETE_WITH_PRODUCTS', default=False, cast=bool
)

# =============================================================================
# ERROR TRACKING
# =============================================================================
SENTRY_DSN = config('SENTRY_DSN', default='')
SENTRY_TRACES_SAMPLE_RATE = config('SENTRY_TRACES_SAMPLE_RATE', default=0.1, cast=float)

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = config('LOG_LEVEL', default='INFO')

# Apply LOGGING when config.settings is imported; turn off when the host
# application configures logging itself
CATALOG_CONFIGURE_LOGGING = config('CATALOG_CONFIGURE_LOGGING', default=True, cast=bool)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'domain': {
            'level': LOG_LEVEL,
            'propagate': True,
        },
        'application': {
            'level': LOG_LEVEL,
            'propagate': True,
        },
        'infrastructure': {
            'level': LOG_LEVEL,
            'propagate': True,
        },
    },
}


def configure_logging():
    """Apply LOGGING, including any environment overrides made after import."""
    logging.config.dictConfig(LOGGING)
