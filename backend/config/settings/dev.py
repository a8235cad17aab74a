"""
Development settings for the product catalog.
"""

from .base import *

# =============================================================================
# LOGGING - Development
# =============================================================================
LOGGING['root']['level'] = 'DEBUG'
LOGGING['loggers']['domain']['level'] = 'DEBUG'
LOGGING['loggers']['application']['level'] = 'DEBUG'
