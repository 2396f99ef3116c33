"""Pytest configuration and fixtures."""

import pytest

import catalogs
import db
from config import settings_for_tests


@pytest.fixture
def tmp_settings(tmp_path):
    """Test-mode settings rooted in a temporary directory."""
    return settings_for_tests(tmp_path)


@pytest.fixture
def stores(tmp_settings):
    """Empty stores (no files written yet)."""
    return db.open_stores(tmp_settings)


@pytest.fixture
def seeded_stores(stores):
    """Stores with default services/discounts, one customer and one vehicle."""
    catalogs.ensure_default_services(stores)
    catalogs.ensure_default_discounts(stores)
    catalogs.add_customer(stores, "John", "1234567890", "john@example.com")
    catalogs.register_vehicle(stores, 1, "KA01AB1234", "Swift", "Red")
    return stores
