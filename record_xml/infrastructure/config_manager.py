"""Configuration Manager for the Record XML Codec.

This module provides the typed codec configuration and a manager that loads it
from environment variables or a JSON file.

Architecture:
    - Infrastructure layer, isolated from the domain
    - Type-safe configuration using Pydantic models
    - Fail-fast validation prevents runtime errors
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from record_xml.domain.record import MAX_BYTE_ARRAY_SIZE

logger = logging.getLogger(__name__)

ENV_PREFIX = "RX_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class CodecConfig(BaseModel):
    """Codec configuration model.

    Parameters:
        max_payload_size: Largest payload materialized when encoding (bytes)
        max_depth: Maximum element nesting depth accepted when parsing
        max_document_size: Maximum document size accepted when parsing (bytes, None = no limit)
        pretty_print: Indent rendered documents
        xml_declaration: Emit an XML declaration when rendering
    """

    max_payload_size: int = Field(default=MAX_BYTE_ARRAY_SIZE, description="Payload materialization limit")
    max_depth: int = Field(default=100, description="Maximum XML nesting depth")
    max_document_size: Optional[int] = Field(None, description="Maximum document size in bytes")
    pretty_print: bool = Field(default=True, description="Indent rendered documents")
    xml_declaration: bool = Field(default=True, description="Emit an XML declaration")

    @field_validator("max_payload_size")
    @classmethod
    def validate_max_payload_size(cls, v: int) -> int:
        """Validate payload limit is positive and fits in memory bounds."""
        if v <= 0:
            raise ValueError(f"max_payload_size must be positive, got {v}")
        if v > MAX_BYTE_ARRAY_SIZE:
            raise ValueError(f"max_payload_size must be at most {MAX_BYTE_ARRAY_SIZE}, got {v}")
        return v

    @field_validator("max_depth")
    @classmethod
    def validate_max_depth(cls, v: int) -> int:
        """Validate depth limit leaves room for the document structure."""
        # result/answers/extractN/meta/value
        if v < 5:
            raise ValueError(f"max_depth must be at least 5, got {v}")
        return v

    @field_validator("max_document_size")
    @classmethod
    def validate_max_document_size(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError(f"max_document_size must be positive, got {v}")
        return v


class ConfigManager:
    """Configuration manager for codec settings.

    Example Usage:
        ```python
        # Load from environment variables
        config = ConfigManager.from_environment()
        codec_config = config.get_codec_config()

        # Load from file
        config = ConfigManager.from_file("codec.json")
        codec_config = config.get_codec_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize configuration manager.

        Parameters:
            config_data: Configuration dictionary
        """
        self._config_data = config_data
        self._codec_config: Optional[CodecConfig] = None

    @classmethod
    def from_environment(cls) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - RX_MAX_PAYLOAD_SIZE: Payload materialization limit in bytes
            - RX_XML_MAX_DEPTH: Maximum XML nesting depth
            - RX_XML_MAX_DOCUMENT_SIZE: Maximum document size in bytes
            - RX_PRETTY_PRINT: Indent rendered documents (true/false)
            - RX_XML_DECLARATION: Emit an XML declaration (true/false)

        A .env file in the working directory is loaded first if present.

        Returns:
            ConfigManager instance
        """
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        codec: Dict[str, Any] = {}
        if os.getenv(f"{ENV_PREFIX}MAX_PAYLOAD_SIZE"):
            codec["max_payload_size"] = int(os.environ[f"{ENV_PREFIX}MAX_PAYLOAD_SIZE"])
        if os.getenv(f"{ENV_PREFIX}XML_MAX_DEPTH"):
            codec["max_depth"] = int(os.environ[f"{ENV_PREFIX}XML_MAX_DEPTH"])
        if os.getenv(f"{ENV_PREFIX}XML_MAX_DOCUMENT_SIZE"):
            codec["max_document_size"] = int(os.environ[f"{ENV_PREFIX}XML_MAX_DOCUMENT_SIZE"])
        if os.getenv(f"{ENV_PREFIX}PRETTY_PRINT"):
            codec["pretty_print"] = os.environ[f"{ENV_PREFIX}PRETTY_PRINT"].lower() in _TRUE_VALUES
        if os.getenv(f"{ENV_PREFIX}XML_DECLARATION"):
            codec["xml_declaration"] = os.environ[f"{ENV_PREFIX}XML_DECLARATION"].lower() in _TRUE_VALUES

        return cls({"codec": codec})

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        Parameters:
            config_path: Path to configuration file

        Returns:
            ConfigManager instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a JSON object")

        return cls(config_data)

    def get_codec_config(self) -> CodecConfig:
        """Get codec configuration.

        Returns:
            CodecConfig instance

        Raises:
            pydantic.ValidationError: If the configuration is invalid
        """
        if self._codec_config is None:
            self._codec_config = CodecConfig(**self._config_data.get("codec", {}))
        return self._codec_config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Parameters:
            key: Configuration key (supports dot notation, e.g., "codec.max_depth")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config_data

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default


def get_codec_config() -> CodecConfig:
    """Convenience function to get codec configuration from environment.

    Returns:
        CodecConfig instance
    """
    return ConfigManager.from_environment().get_codec_config()
