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

"""Public ts-enable operations.

Example:
    from ts_enable import get_controller

    controller = get_controller(host)
    controller.setup({"parsers": ["lua", "python"], "highlights": True})

    # Wire to the host's FileType event
    controller.handle_filetype_event(document, "python")

    # User commands
    controller.toggle()
    controller.detach()
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, Optional, Union

from ts_enable.config import FeatureConfig, TSEnableConfig, coerce_config
from ts_enable.context import TSEnableContext
from ts_enable.engine import EnablementEngine
from ts_enable.features import FeatureApplier
from ts_enable.protocol import Document, HostProtocol, LanguageAvailability

logger = logging.getLogger(__name__)


# Global singleton instance
_controller_instance: Optional[LifecycleController] = None
_controller_lock = threading.Lock()


class LifecycleController:
    """start/stop/toggle/setup/attach/detach/ensure_installed for one host."""

    def __init__(
        self,
        host: HostProtocol,
        context: Optional[TSEnableContext] = None,
        applier: Optional[FeatureApplier] = None,
    ) -> None:
        self.host = host
        self.context = context or TSEnableContext(host)
        self.applier = applier or FeatureApplier(host)
        self.engine = EnablementEngine(self.context, self.applier)

    def is_active(self, document: Optional[Document] = None) -> bool:
        if document is None:
            document = self.host.current_document()
        return self.applier.is_active(document)

    def start(
        self,
        document: Optional[Document] = None,
        language: Optional[str] = None,
        config: Optional[FeatureConfig] = None,
    ) -> None:
        """Enable features for a document.

        Args:
            document: Document handle (default: current document)
            language: Language (default: the document's filetype)
            config: Feature flags (default: resolved for ``language``)
        """
        self.context.ensure_initialized()

        if document is None:
            document = self.host.current_document()
        if language is None:
            language = self.host.get_filetype(document)
        if config is None:
            config = self.context.resolve(language)

        self.applier.start(document, language, config)

    def stop(self, document: Optional[Document] = None) -> None:
        """Disable features and restore the document's previous options."""
        if document is None:
            document = self.host.current_document()
        self.applier.stop(document)

    def toggle(self) -> str:
        """Stop the current document if active, else start it.

        Returns:
            "stopped" or "started"
        """
        if self.is_active():
            self.stop()
            action = "stopped"
        else:
            self.start()
            action = "started"

        self.host.notify(f"ts-enable {action}")
        return action

    def setup(self, config: Union[TSEnableConfig, Mapping[str, Any], None] = None) -> None:
        """Replace the global configuration.

        Non-mapping input is ignored. The availability registry is not
        rebuilt once initialized.

        Raises:
            ConfigurationError: If a mapping fails validation
        """
        resolved = coerce_config(config)
        if resolved is None:
            logger.debug(f"Ignoring setup() with {type(config).__name__}")
            return
        self.context.set_config(resolved)

    def attach(
        self, document: Optional[Document] = None, filetype: Optional[str] = None
    ) -> Optional[LanguageAvailability]:
        """Enable features, installing the grammar if needed."""
        if document is None:
            document = self.host.current_document()
        if filetype is None:
            filetype = self.host.get_filetype(document)
        return self.engine.attach(document, filetype)

    def detach(self) -> None:
        """Disable automatic attach and stop the current document."""
        self.context.attach_enabled = False
        self.stop()

    def ensure_installed(self):
        """Install every configured parser now.

        Returns:
            The install task, or None if no installer is available
        """
        self.context.ensure_initialized()
        parsers = list(self.context.config.parsers)
        return self.context.gateway.install_many(parsers, self.engine.on_installed)

    def handle_filetype_event(self, document: Document, filetype: str) -> Optional[LanguageAvailability]:
        """FileType event hook; attaches only while automatic attach is enabled."""
        if not self.context.attach_enabled:
            return None
        return self.attach(document, filetype)


def get_controller(host: Optional[HostProtocol] = None) -> LifecycleController:
    """Get singleton controller instance.

    Args:
        host: Editor host, required on the first call

    Raises:
        ValueError: If no controller exists yet and no host is given
    """
    global _controller_instance

    if _controller_instance is None:
        with _controller_lock:
            if _controller_instance is None:
                if host is None:
                    raise ValueError("get_controller() needs a host on first use")
                _controller_instance = LifecycleController(host)
                logger.debug("Created singleton LifecycleController instance")

    return _controller_instance


def reset_controller() -> None:
    """Reset the singleton controller. Primarily useful for testing."""
    global _controller_instance

    with _controller_lock:
        _controller_instance = None
