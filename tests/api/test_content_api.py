"""Tests for content and health API endpoints."""

import pytest
from fastapi.testclient import TestClient

from sitedesk import SiteDesk
from sitedesk.api.app import create_app
from sitedesk.config import SiteDeskConfig, StorageConfig


@pytest.fixture
def sitedesk(temp_storage_dir):
    config = SiteDeskConfig(
        storage=StorageConfig(
            working_dir=str(temp_storage_dir / "data"),
            backup_dir=str(temp_storage_dir / "backups"),
        ),
    )
    return SiteDesk(config)


@pytest.fixture
def client(sitedesk):
    app = create_app()
    app.state.sitedesk = sitedesk
    return TestClient(app)


def test_get_missing_content_returns_defaults(client):
    response = client.get("/api/v1/content/site_content/en")

    assert response.status_code == 200
    assert response.json()["document"] == {}
    assert response.json()["key"] == "en"


def test_unknown_editor(client):
    response = client.get("/api/v1/content/blog/en")
    assert response.status_code == 404


def test_unicode_digit_key_is_text(client):
    response = client.get("/api/v1/content/site_settings/²")

    assert response.status_code == 200
    assert response.json()["key"] == "²"
    assert response.json()["document"]["site_title"] == "Default Site Title"


def test_patch_applies_edits_in_order(client):
    response = client.patch("/api/v1/content/site_content/en", json={"edits": [
        {"path": ["hero", "title"], "value": "Hi"},
        {"path": ["hero", "title", "x"], "value": 1},
        {"path": ["items", 1], "value": "b"},
    ]})

    assert response.status_code == 200
    body = response.json()
    assert body["applied"] == [0, 2]
    assert body["rejected"] == [1]
    assert body["saved"] is True
    assert body["document"] == {"hero": {"title": "Hi"}, "items": [None, "b"]}

    response = client.get("/api/v1/content/site_content/en", params={"flat": True})
    assert response.json()["document"] == {"hero": {"title": "Hi"}, "items": [None, "b"]}
    assert response.json()["flat"] == {"hero.title": "Hi", "items": '[null, "b"]'}


def test_patch_nothing_applied_is_not_saved(client, temp_storage_dir):
    response = client.patch("/api/v1/content/site_settings/1", json={"edits": [
        {"path": ["id"], "value": 5},
        {"path": ["site_title", "x"], "value": "y"},
    ]})

    assert response.status_code == 200
    assert response.json()["rejected"] == [0, 1]
    assert response.json()["saved"] is False
    assert not (temp_storage_dir / "data" / "partition_site_settings.json").exists()


def test_patch_requires_edits(client):
    response = client.patch("/api/v1/content/site_content/en", json={"edits": []})
    assert response.status_code == 422


def test_put_replaces_document(client, sitedesk):
    response = client.put("/api/v1/content/site_settings/1", json={
        "document": {"site_title": "Acme", "logo_url": "/logo.svg"}
    })

    assert response.status_code == 200
    assert response.json()["key"] == 1
    [row] = sitedesk.partitions["site_settings"]._data
    assert row.pop("updated_at")
    assert row == {"site_title": "Acme", "logo_url": "/logo.svg", "id": 1}


def test_reset_to_defaults(client, sitedesk):
    client.patch("/api/v1/content/site_settings/1", json={"edits": [
        {"path": ["site_title"], "value": "Custom"},
    ]})

    response = client.post("/api/v1/content/site_settings/1/reset")

    assert response.status_code == 200
    assert response.json()["document"]["site_title"] == "Default Site Title"
    assert sitedesk.partitions["site_settings"]._data[0]["site_title"] == "Default Site Title"


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["blob"] is True
    assert body["partitions"]["site_content"] is True

    assert client.get("/api/v1/health/ready").json() == {"status": "ready"}
    assert client.get("/api/v1/health/live").json() == {"status": "alive"}
