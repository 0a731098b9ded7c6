"""Shared fixtures and test data for storage testing."""

import pytest
import tempfile
from pathlib import Path
from typing import Dict, Any, List


@pytest.fixture
def temp_storage_dir():
    """Temporary directory for storage tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_global_config(temp_storage_dir) -> Dict[str, Any]:
    """Mock global configuration for storage tests."""
    return {
        "working_dir": str(temp_storage_dir / "data"),
        "backup_dir": str(temp_storage_dir / "backups"),
        "request_timeout": 5.0,
    }


@pytest.fixture
def standard_site_dataset() -> Dict[str, List[Dict[str, Any]]]:
    """Small site with nested content, settings and list partitions."""
    return {
        "site_content": [
            {"language": "en", "content": {"hero": {"title": "Hello", "bullets": ["fast", "simple"]}}},
            {"language": "fr", "content": {"hero": {"title": "Bonjour"}}},
        ],
        "site_settings": [
            {"id": 1, "site_title": "Acme", "logo_url": "", "updated_at": "2024-05-01T12:00:00Z"},
        ],
        "social_links": [],
        "pages": [
            {"id": "about", "title": "About us", "published": True, "order": 2},
            {"id": "home", "title": "Home", "published": True, "order": 1},
        ],
    }
