"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.
"""

import os
from typing import Optional

from record_xml.infrastructure.config_manager import ENV_PREFIX, CodecConfig, ConfigManager

# Application metadata
APP_NAME = "record-xml"
APP_VERSION = "1.0.0"


class Settings:
    """Application settings loaded from configuration manager and environment.

    This class provides a unified interface for accessing application settings,
    combining values from the configuration manager with environment variables
    and sensible defaults.
    """

    def __init__(self):
        """Initialize settings from environment."""
        self._codec_config: Optional[CodecConfig] = None
        self._config_manager: Optional[ConfigManager] = None

        self.app_name = os.getenv(f"{ENV_PREFIX}APP_NAME", APP_NAME)

        # Logging
        self.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO")
        self.log_json = os.getenv(f"{ENV_PREFIX}LOG_JSON", "false").lower() == "true"

    @property
    def config_manager(self) -> ConfigManager:
        """Get configuration manager instance."""
        if self._config_manager is None:
            self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def codec_config(self) -> CodecConfig:
        """Get codec configuration.

        Returns:
            CodecConfig instance loaded lazily on first access
        """
        if self._codec_config is None:
            self._codec_config = self.config_manager.get_codec_config()
        return self._codec_config


# Global settings instance
settings = Settings()
