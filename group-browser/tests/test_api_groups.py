"""Tests for the group browsing HTTP API.

Run with: pytest tests/test_api_groups.py -v
"""

import sqlite3

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_service
from api.main import create_app
from config import AppConfig, ConfigManager
from config.config_manager import CacheConfig, DatabaseConfig
from storage import SCHEMA, StorageError

from conftest import Seeder


@pytest.fixture
def client(tmp_path):
    """API client over a seeded database with tenant acme."""
    db_path = tmp_path / "api.db"
    conn = sqlite3.connect(db_path)
    conn.executescript(SCHEMA)
    conn.close()

    seeder = Seeder(db_path)
    seeder.tenant("acme")
    seeder.cluster(1, 5, media_type="VIDEO")
    seeder.cluster(2, 40)
    seeder.cluster(3, 2, media_type="VIDEO", page_name="Other Page")
    seeder.group(9, member_count=3, representative_id="deleted-upstream")

    config_manager = ConfigManager(tmp_path / "config")
    config_manager.save(AppConfig(
        database=DatabaseConfig(path=str(db_path)),
        cache=CacheConfig(ttl_seconds=0),
        log_level="DEBUG",
    ))

    with TestClient(create_app(config_manager)) as test_client:
        yield test_client


class TestGroupsEndpoint:
    """Tests for GET /groups."""

    def test_duplicate_range(self, client):
        response = client.get(
            "/groups",
            params={"tenant_id": "acme", "min_duplicates": 3, "max_duplicates": 100},
        )
        assert response.status_code == 200
        body = response.json()
        assert [g["cluster_id"] for g in body["data"]] == [2, 1]
        assert body["meta"]["total"] == 3

    def test_dangling_group_counted_but_not_returned(self, client):
        body = client.get("/groups", params={"tenant_id": "acme"}).json()
        assert [g["cluster_id"] for g in body["data"]] == [2, 1, 3]
        assert body["meta"]["total"] == 4
        assert body["meta"]["returned"] == 3

    def test_card_fields(self, client):
        body = client.get(
            "/groups", params={"tenant_id": "acme", "media_type": "VIDEO", "page_size": 1}
        ).json()
        card = body["data"][0]
        assert card["cluster_id"] == 1
        assert card["duplicates_count"] == 5
        assert card["status"] == "Stable"
        assert card["representative"]["media_type"] == "VIDEO"
        assert card["representative"]["external_id"] == "acme-1-000"
        assert card["deep_link"] == "https://www.facebook.com/ads/library/?id=acme-1-000"
        assert body["meta"] == {
            "total": 2, "returned": 1, "page": 1, "page_size": 1, "has_more": True,
        }

    def test_date_window(self, client):
        response = client.get(
            "/groups",
            params={"tenant_id": "acme", "start_date": "2024-04-01", "end_date": "2024-04-30"},
        )
        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_invalid_sort(self, client):
        response = client.get("/groups", params={"tenant_id": "acme", "sort": "popular"})
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "InvalidFilter"
        assert detail["field"] == "sort"
        assert detail["retryable"] is False

    def test_inverted_duplicate_range(self, client):
        response = client.get(
            "/groups",
            params={"tenant_id": "acme", "min_duplicates": 10, "max_duplicates": 2},
        )
        assert response.status_code == 400

    def test_unknown_tenant(self, client):
        response = client.get("/groups", params={"tenant_id": "nobody"})
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "TenantNotFound"

    def test_storage_failure(self, client, monkeypatch):
        async def _broken(*args, **kwargs):
            raise StorageError("disk I/O error")

        monkeypatch.setattr(get_service().store.tenants, "get", _broken)
        response = client.get("/groups", params={"tenant_id": "acme"})
        assert response.status_code == 503
        assert response.json()["detail"]["retryable"] is True


class TestGroupDetailEndpoints:
    """Tests for stats, page names and single-group routes."""

    def test_stats(self, client):
        response = client.get("/groups/stats", params={"tenant_id": "acme"})
        assert response.json() == {"min": 2, "max": 40}

    def test_page_names(self, client):
        response = client.get("/groups/page-names", params={"tenant_id": "acme"})
        assert response.json() == [
            {"name": "Acme Page", "count": 2},
            {"name": "Other Page", "count": 1},
        ]

    def test_single_group(self, client):
        response = client.get("/groups/2", params={"tenant_id": "acme"})
        assert response.status_code == 200
        assert response.json()["duplicates_count"] == 40

    def test_single_group_missing(self, client):
        response = client.get("/groups/99", params={"tenant_id": "acme"})
        assert response.status_code == 404

    def test_single_group_dangling(self, client):
        response = client.get("/groups/9", params={"tenant_id": "acme"})
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "DanglingReference"

    def test_metadata(self, client):
        response = client.get("/groups/1/metadata", params={"tenant_id": "acme"})
        body = response.json()
        assert body["count"] == 5
        assert body["content_types"] == ["VIDEO"]
        assert body["active_period_days"] == 9

    def test_metadata_empty_cluster(self, client):
        response = client.get("/groups/9/metadata", params={"tenant_id": "acme"})
        assert response.status_code == 404

    def test_metadata_sentinel(self, client):
        response = client.get("/groups/-1/metadata", params={"tenant_id": "acme"})
        assert response.status_code == 400

    def test_members(self, client):
        first = client.get("/groups/1/members", params={"tenant_id": "acme", "limit": 3}).json()
        assert [m["external_id"] for m in first["data"]] == ["acme-1-000", "acme-1-001", "acme-1-002"]
        assert first["has_more"] is True

        rest = client.get(
            "/groups/1/members",
            params={"tenant_id": "acme", "limit": 3, "cursor": first["next_cursor"]},
        ).json()
        assert [m["external_id"] for m in rest["data"]] == ["acme-1-003", "acme-1-004"]
        assert rest["has_more"] is False
        assert rest["next_cursor"] is None

    def test_creative(self, client):
        response = client.get("/creatives/acme-2-003", params={"tenant_id": "acme"})
        body = response.json()
        assert body["duplicates_count"] == 40
        assert body["creative"]["cluster_id"] == 2

    def test_creative_missing(self, client):
        response = client.get("/creatives/nope", params={"tenant_id": "acme"})
        assert response.status_code == 404


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["configured"] is True
        assert body["database_exists"] is True
        assert body["cache_ttl_seconds"] == 0
