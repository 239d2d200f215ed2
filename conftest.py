"""Pytest configuration for Catalog Toolkit."""

import pytest

from catalog_toolkit.config import CatalogConfig, set_config
from catalog_toolkit.soft_delete import reset_registry


def pytest_configure(config):
    """Configure pytest with custom settings."""
    # Add custom markers
    config.addinivalue_line("markers", "scenario: end-to-end catalog scenario")


@pytest.fixture(autouse=True)
def isolated_config():
    """Give every test a fresh configuration and capability registry."""
    set_config(CatalogConfig(environment="test", database_url="sqlite:///:memory:"))
    reset_registry()
    yield
    set_config(None)
    reset_registry()
