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

"""Process-wide ts-enable state.

Holds the global configuration, the availability registry, the builtin
grammar index and the installer gateway. The registry and index are built
once, on the first ``ensure_initialized()`` call; replacing the configuration
afterwards does not rebuild them.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ts_enable.config import ConfigResolver, FeatureConfig, TSEnableConfig, load_config
from ts_enable.errors import ConfigurationError
from ts_enable.installer import InstallerGateway
from ts_enable.protocol import HostProtocol, InstallerProtocol
from ts_enable.registry import AvailabilityRegistry, BuiltinGrammarIndex

logger = logging.getLogger(__name__)


class TSEnableContext:
    """Shared state for one host process."""

    def __init__(
        self,
        host: HostProtocol,
        config: Optional[TSEnableConfig] = None,
        installer: Optional[InstallerProtocol] = None,
        installer_loader: Optional[Callable[[], Optional[InstallerProtocol]]] = None,
    ) -> None:
        """Initialize context.

        Args:
            host: Editor host
            config: Global configuration (default: loaded from $TS_ENABLE_CONFIG)
            installer: Grammar installer (default: discovered via entry points)
            installer_loader: Custom installer discovery function
        """
        self.host = host
        self._config = config
        self.gateway = InstallerGateway(installer=installer, loader=installer_loader)
        self.registry = AvailabilityRegistry()
        self.builtin = BuiltinGrammarIndex()
        self.initialized = False

        # Cleared by detach(); gates automatic attach on filetype events
        self.attach_enabled = True

    @property
    def config(self) -> TSEnableConfig:
        """Global configuration, loaded on first access.

        A file or ``TS_ENABLE_*`` variable that fails to load is logged once
        and replaced by an empty configuration, so no filetype is managed.
        """
        if self._config is None:
            try:
                self._config = load_config()
            except ConfigurationError as e:
                logger.error(f"ts-enable configuration ignored: {e.message}")
                self._config = TSEnableConfig.model_construct()
        return self._config

    def set_config(self, config: TSEnableConfig) -> None:
        """Replace the global configuration; registry and index are kept."""
        self._config = config
        if self.initialized:
            logger.debug("Configuration replaced after initialization, registry unchanged")

    def resolve(self, language: Optional[str]) -> FeatureConfig:
        return ConfigResolver(self.config).resolve(language)

    def ensure_initialized(self) -> bool:
        """Seed the registry and scan builtin queries, once.

        Returns:
            True if initialization ran on this call
        """
        if self.initialized:
            return False
        self.initialized = True

        self.registry.seed(self.config.parsers, self.host.get_filetypes)

        try:
            paths = list(self.host.bundled_query_paths())
        except Exception as e:
            logger.warning(f"Could not list bundled query files: {e}")
            paths = []
        self.builtin = BuiltinGrammarIndex.scan(paths)

        logger.info(
            f"ts-enable initialized: {len(self.config.parsers)} parsers, "
            f"{len(self.registry)} filetypes, {len(self.builtin)} builtin languages"
        )
        return True
