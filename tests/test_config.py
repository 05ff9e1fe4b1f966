"""Unit tests for Config class."""

import os
from pathlib import Path

import pytest

from index_queue import Config


class TestConfig:
    """Test suite for Config class."""

    def test_config_has_required_attributes(self):
        """Test that Config class has all required configuration attributes."""
        # Database configuration
        assert hasattr(Config, "INDEX_QUEUE_DIR")
        assert hasattr(Config, "DATABASE_URL")

        # Queue configuration
        assert hasattr(Config, "INDEX_QUEUE_BATCH_SIZE")
        assert hasattr(Config, "INVALID_ROOT_PAGE_ID")
        assert hasattr(Config, "ALLOWED_PAGE_TYPES")

        # MQTT configuration
        assert hasattr(Config, "MQTT_BROKER")
        assert hasattr(Config, "MQTT_PORT")
        assert hasattr(Config, "MQTT_TOPIC")
        assert hasattr(Config, "MQTT_RETAIN_STATUS")
        assert hasattr(Config, "BROADCAST_TYPE")
        assert hasattr(Config, "LOG_LEVEL")

    def test_config_value_types(self):
        """Test that Config values have appropriate types."""
        assert isinstance(Config.INDEX_QUEUE_DIR, (str, Path))
        assert isinstance(Config.MQTT_PORT, int)
        assert isinstance(Config.INDEX_QUEUE_BATCH_SIZE, int)
        assert isinstance(Config.MQTT_RETAIN_STATUS, bool)
        assert all(isinstance(doktype, int) for doktype in Config.ALLOWED_PAGE_TYPES)

    def test_database_url_format(self):
        """Test that the default database lives in INDEX_QUEUE_DIR."""
        if os.getenv("DATABASE_URL"):
            pytest.skip("DATABASE_URL overridden")

        assert Config.DATABASE_URL.startswith("sqlite:///")
        assert Config.DATABASE_URL.endswith("/index_queue.db")
        assert str(Config.INDEX_QUEUE_DIR) in Config.DATABASE_URL

    def test_queue_defaults(self):
        """Test queue default values."""
        assert Config.INDEX_QUEUE_BATCH_SIZE == 50 or os.getenv("INDEX_QUEUE_BATCH_SIZE")
        assert Config.ALLOWED_PAGE_TYPES == [1, 7] or os.getenv("INDEX_QUEUE_ALLOWED_PAGE_TYPES")
        assert Config.INVALID_ROOT_PAGE_ID == 0

    def test_mqtt_defaults(self):
        """Test MQTT default values."""
        assert Config.MQTT_BROKER == "localhost" or os.getenv("MQTT_BROKER")
        assert Config.MQTT_PORT == 1883 or os.getenv("MQTT_PORT")
        assert Config.MQTT_TOPIC == "index_queue/events" or os.getenv("MQTT_TOPIC")
        assert Config.BROADCAST_TYPE == "none" or os.getenv("BROADCAST_TYPE")
        assert Config.LOG_LEVEL in ["DEBUG", "INFO", "WARNING", "ERROR"] or os.getenv(
            "LOG_LEVEL"
        )


class TestConfigHelpers:
    """Test suite for the environment parsing helpers."""

    def test_get_int(self, monkeypatch):
        monkeypatch.setenv("INDEX_QUEUE_TEST_INT", "12")

        assert Config._get_int("INDEX_QUEUE_TEST_INT", 3) == 12
        assert Config._get_int("INDEX_QUEUE_TEST_MISSING", 3) == 3

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False)],
    )
    def test_get_bool(self, monkeypatch, value, expected):
        monkeypatch.setenv("INDEX_QUEUE_TEST_BOOL", value)

        assert Config._get_bool("INDEX_QUEUE_TEST_BOOL") is expected

    def test_get_list_skips_empty_values(self, monkeypatch):
        monkeypatch.setenv("INDEX_QUEUE_TEST_LIST", "1,,7,")

        assert Config._get_list("INDEX_QUEUE_TEST_LIST", "") == ["1", "7"]
        assert Config._get_list("INDEX_QUEUE_TEST_MISSING", "a,b") == ["a", "b"]

    def test_index_queue_dir_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("INDEX_QUEUE_DIR", str(tmp_path))

        assert Config._get_index_queue_dir() == str(tmp_path)

    def test_index_queue_dir_must_exist(self, monkeypatch, tmp_path):
        monkeypatch.setenv("INDEX_QUEUE_DIR", str(tmp_path / "missing"))

        with pytest.raises(ValueError, match="INDEX_QUEUE_DIR"):
            _ = Config._get_index_queue_dir()
