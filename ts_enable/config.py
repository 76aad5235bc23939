# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration for ts-enable.

The global configuration can be given programmatically (``setup()``), through
``TS_ENABLE_*`` environment variables, or through a YAML file:

    parsers: [lua, python, json]
    auto_install: true
    highlights: true
    folds: true
    indents: false
    parser_settings:
      markdown:
        highlights: true
      zimbu: {}          # silence zimbu entirely

An entry in ``parser_settings`` replaces the global flags for that language;
it is never merged field by field with them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ts_enable.errors import ConfigurationError, ErrorCategory

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TS_ENABLE_CONFIG"


class FeatureConfig(BaseModel):
    """Effective feature flags for one language."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    auto_install: bool = False
    highlights: bool = False
    folds: bool = False
    indents: bool = False

    @property
    def any_enabled(self) -> bool:
        return self.highlights or self.folds or self.indents


class TSEnableConfig(BaseSettings):
    """Global ts-enable configuration."""

    model_config = SettingsConfigDict(env_prefix="TS_ENABLE_", extra="ignore")

    # Tree-sitter languages managed by ts-enable
    parsers: List[str] = Field(default_factory=list)

    # Install missing grammars through the installer service
    auto_install: bool = False

    # Syntax-tree based highlighting
    highlights: bool = False

    # Syntax-tree fold expression
    folds: bool = False

    # Syntax-tree indent expression
    indents: bool = False

    # Per-language replacements of the flags above
    parser_settings: Dict[str, FeatureConfig] = Field(default_factory=dict)

    @field_validator("parser_settings", mode="before")
    @classmethod
    def _empty_overrides(cls, value: Any) -> Any:
        # YAML `zimbu:` with no body parses to None; treat it as an empty override
        if isinstance(value, Mapping):
            return {lang: (settings if settings is not None else {}) for lang, settings in value.items()}
        return value

    @field_validator("parsers", mode="before")
    @classmethod
    def _none_parsers(cls, value: Any) -> Any:
        return [] if value is None else value

    def global_features(self) -> FeatureConfig:
        """Global flags as a FeatureConfig."""
        return FeatureConfig(
            auto_install=self.auto_install,
            highlights=self.highlights,
            folds=self.folds,
            indents=self.indents,
        )


class ConfigResolver:
    """Resolve the effective FeatureConfig of a language."""

    def __init__(self, config: Optional[TSEnableConfig] = None) -> None:
        self._config = config or TSEnableConfig.model_construct()

    @property
    def config(self) -> TSEnableConfig:
        return self._config

    def has_override(self, language: str) -> bool:
        return language in self._config.parser_settings

    def resolve(self, language: Optional[str]) -> FeatureConfig:
        """Get effective flags for a language.

        Args:
            language: Tree-sitter language name

        Returns:
            The language override if one exists (even an empty one),
            otherwise the global flags
        """
        if language is not None and language in self._config.parser_settings:
            return self._config.parser_settings[language]
        return self._config.global_features()


def resolve_config(config: Optional[TSEnableConfig], language: Optional[str]) -> FeatureConfig:
    """Functional shortcut for ``ConfigResolver(config).resolve(language)``."""
    return ConfigResolver(config).resolve(language)


def coerce_config(value: Union[TSEnableConfig, Mapping[str, Any], None]) -> Optional[TSEnableConfig]:
    """Build a TSEnableConfig from a config object or mapping.

    Returns:
        The config, or None for unsupported input

    Raises:
        ConfigurationError: If a mapping fails validation
    """
    if isinstance(value, TSEnableConfig):
        return value
    if isinstance(value, Mapping):
        try:
            return TSEnableConfig(**dict(value))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid ts-enable configuration: {e}", cause=e) from e
    return None


def load_config(path: Optional[Union[str, Path]] = None) -> TSEnableConfig:
    """Load configuration from a YAML file.

    Args:
        path: YAML file path (default: $TS_ENABLE_CONFIG)

    Returns:
        Parsed configuration, or defaults (plus ``TS_ENABLE_*`` variables) if
        no file is configured or the file does not exist

    Raises:
        ConfigurationError: If the file is not valid YAML, or the file or
            environment fails validation
    """
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if not env_path:
            return _build_config({}, "environment")
        path = env_path

    file_path = Path(path).expanduser()
    if not file_path.exists():
        logger.debug(f"Config file not found: {file_path}")
        return _build_config({}, "environment")

    try:
        with open(file_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse {file_path}: {e}", path=str(file_path), cause=e
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read {file_path}: {e}",
            path=str(file_path),
            category=ErrorCategory.CONFIG_MISSING,
            cause=e,
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping at the top of {file_path}, got {type(data).__name__}",
            path=str(file_path),
        )

    config = _build_config(data, str(file_path), path=str(file_path))
    logger.debug(f"Loaded ts-enable config from {file_path}: parsers={config.parsers}")
    return config


def _build_config(data: Dict[str, Any], source: str, path: Optional[str] = None) -> TSEnableConfig:
    # TS_ENABLE_* variables are validated here too
    try:
        return TSEnableConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {source}: {e}", path=path, cause=e) from e
