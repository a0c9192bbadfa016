"""Tests for storage models and config loading.

Run with: pytest tests/test_models.py -v
"""

import json

import pytest

from config import AppConfig, ConfigError, ConfigManager
from services import PublicBucketResolver
from storage.models import UNTITLED, CreativeRecord, MediaType, effective_title, title_from_cards


def _creative(**fields):
    return CreativeRecord(external_id="c1", tenant_id="acme", page_name="Acme", media_type=MediaType.IMAGE, **fields)


class TestEffectiveTitle:
    """Tests for the title precedence rule."""

    def test_plain_title(self):
        assert effective_title(_creative(title="  Big Sale ")) == "Big Sale"

    def test_template_title_falls_back_to_cards(self):
        cards = json.dumps([{"title": "Card headline"}, {"title": "Second"}])
        creative = _creative(title="{{product.brand}}", cards_json=cards, caption="Caption")
        assert effective_title(creative) == "Card headline"

    def test_card_fields_in_order(self):
        assert title_from_cards([{"body": "Body text", "name": "Name"}]) == "Body text"
        assert title_from_cards([{"title": " ", "text": "Text"}]) == "Text"

    def test_untitled_title_falls_back_to_caption(self):
        assert effective_title(_creative(title="Untitled", caption="Caption")) == "Caption"

    def test_broken_cards_ignored(self):
        creative = _creative(cards_json="{not json", caption="Caption")
        assert effective_title(creative) == "Caption"
        assert title_from_cards(json.dumps({"title": "not a list"})) is None

    def test_nothing_usable(self):
        assert effective_title(_creative(caption="   ")) == UNTITLED


class TestCreativeRecord:
    """Tests for CreativeRecord helpers."""

    def test_is_clustered(self):
        assert _creative(cluster_id=4).is_clustered
        assert not _creative(cluster_id=-1).is_clustered
        assert not _creative().is_clustered


class TestPublicBucketResolver:
    """Tests for media URL resolution."""

    def test_joins_base_and_reference(self):
        resolver = PublicBucketResolver("https://cdn.example.com/")
        assert resolver.resolve_url(_creative(media_ref="/a/b.jpg")) == "https://cdn.example.com/a/b.jpg"

    def test_missing_reference(self):
        assert PublicBucketResolver("https://cdn.example.com").resolve_url(_creative()) is None


class TestConfigManager:
    """Tests for YAML configuration."""

    def test_defaults_without_file(self, tmp_path):
        config = ConfigManager(tmp_path).get_config()
        assert config.cache.ttl_seconds == 120
        assert config.query.default_page_size == 24
        assert config.query.max_page_size == 500
        assert config.status.new_window_days == 7
        assert config.status.inactive_cycles == 3

    def test_save_and_load(self, tmp_path):
        manager = ConfigManager(tmp_path)
        config = AppConfig()
        config.cache.ttl_seconds = 0
        manager.save(config)

        loaded = ConfigManager(tmp_path).load()
        assert loaded.cache.ttl_seconds == 0
        assert loaded == config

    def test_load_missing(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigManager(tmp_path).load()

    def test_invalid_values(self, tmp_path):
        (tmp_path / "config.yaml").write_text("cache:\n  ttl_seconds: -5\n")
        with pytest.raises(ConfigError):
            ConfigManager(tmp_path).get_config()

    def test_not_a_mapping(self, tmp_path):
        (tmp_path / "config.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ConfigError):
            ConfigManager(tmp_path).load()

    def test_update(self, tmp_path):
        manager = ConfigManager(tmp_path)
        updated = manager.update(log_level="DEBUG")
        assert updated.log_level == "DEBUG"
        assert ConfigManager(tmp_path).load().log_level == "DEBUG"
