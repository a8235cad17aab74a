"""
Tests for settings and logging configuration.
"""

import logging

from config import settings
from domain.shared.value_objects import SUPPORTED_CURRENCIES


class TestSettings:

    def test_defaults(self):
        assert settings.CATALOG_DEFAULT_CURRENCY in SUPPORTED_CURRENCIES
        assert 0 < settings.CATALOG_DEFAULT_PAGE_SIZE <= settings.CATALOG_MAX_PAGE_SIZE
        assert settings.CATALOG_LOW_STOCK_THRESHOLD >= 0
        assert isinstance(settings.CATALOG_BLOCK_DELETE_WITH_PRODUCTS, bool)
        assert isinstance(settings.CATALOG_CONFIGURE_LOGGING, bool)

    def test_logging_covers_every_layer(self):
        assert set(settings.LOGGING["loggers"]) == {"domain", "application", "infrastructure"}

    def test_importing_settings_applies_logging(self):
        if not settings.CATALOG_CONFIGURE_LOGGING:
            return

        expected = settings.LOGGING["loggers"]["infrastructure"]["level"]
        assert logging.getLogger("infrastructure").level == logging.getLevelName(expected)

    def test_configure_logging(self):
        settings.configure_logging()

        assert logging.getLogger("application").propagate
        assert logging.getLogger("domain").level != logging.NOTSET
