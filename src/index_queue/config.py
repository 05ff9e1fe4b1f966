"""Configuration for the index queue.

Usage:
    from index_queue.config import Config

    # Access config values
    database_url = Config.DATABASE_URL
    batch_size = Config.INDEX_QUEUE_BATCH_SIZE
"""

import os


class Config:
    """Centralized configuration for the index queue.

    All configuration values are class variables that can be accessed directly.
    Values are loaded from environment variables with sensible defaults.

    Example:
        from index_queue.config import Config

        print(Config.INDEX_QUEUE_DIR)
        print(Config.DATABASE_URL)
    """

    # ========================================================================
    # Helper methods (static)
    # ========================================================================

    @staticmethod
    def _get_index_queue_dir() -> str:
        """Get and validate INDEX_QUEUE_DIR environment variable.

        Falls back to the current working directory.

        Returns:
            Validated INDEX_QUEUE_DIR path

        Raises:
            ValueError: If INDEX_QUEUE_DIR does not exist or is not writable
        """
        index_queue_dir = os.getenv("INDEX_QUEUE_DIR") or os.getcwd()

        if not os.access(index_queue_dir, os.W_OK):
            raise ValueError(
                f"INDEX_QUEUE_DIR does not exist or no write permission: {index_queue_dir}"
            )

        return index_queue_dir

    @staticmethod
    def _get_value(key: str, default: str) -> str:
        """Get configuration value from environment with optional default."""
        return os.getenv(key, default)

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer configuration value."""
        return int(os.getenv(key, str(default)))

    @staticmethod
    def _get_bool(key: str, default: bool = False) -> bool:
        """Get boolean configuration value."""
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    @staticmethod
    def _get_list(key: str, default: str, separator: str = ",") -> list[str]:
        """Get list configuration value."""
        return [value for value in os.getenv(key, default).split(separator) if value]

    # ========================================================================
    # Common Configuration
    # ========================================================================

    INDEX_QUEUE_DIR: str = _get_index_queue_dir()

    DATABASE_URL: str = _get_value("DATABASE_URL", f"sqlite:///{INDEX_QUEUE_DIR}/index_queue.db")

    LOG_LEVEL: str = _get_value("LOG_LEVEL", "INFO")

    # ========================================================================
    # Queue Configuration
    # ========================================================================

    # Default number of items handed to the indexer per run
    INDEX_QUEUE_BATCH_SIZE: int = _get_int("INDEX_QUEUE_BATCH_SIZE", 50)

    # Root page id of records that do not belong to any site
    INVALID_ROOT_PAGE_ID: int = 0

    # Page doktypes queued when a configuration does not list its own
    ALLOWED_PAGE_TYPES: list[int] = [
        int(value) for value in _get_list("INDEX_QUEUE_ALLOWED_PAGE_TYPES", "1,7")
    ]

    # ========================================================================
    # MQTT Configuration
    # ========================================================================

    BROADCAST_TYPE: str = _get_value("BROADCAST_TYPE", "none")
    MQTT_BROKER: str = _get_value("MQTT_BROKER", "localhost")
    MQTT_PORT: int = _get_int("MQTT_PORT", 1883)
    MQTT_TOPIC: str = _get_value("MQTT_TOPIC", "index_queue/events")
    MQTT_RETAIN_STATUS: bool = _get_bool("MQTT_RETAIN_STATUS", False)
