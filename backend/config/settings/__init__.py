"""
Settings module initialization.
Automatically selects settings based on CATALOG_ENV environment variable
and applies LOGGING once the selected module is loaded.
"""

from decouple import config

env = config('CATALOG_ENV', default='dev')

if env == 'prod':
    from .prod import *
else:
    from .dev import *

if CATALOG_CONFIGURE_LOGGING:
    configure_logging()
