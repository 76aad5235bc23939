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

"""User command dispatch (``:TSEnableExec <sub-command>`` in Neovim)."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from ts_enable.controller import LifecycleController
from ts_enable.errors import CommandError

logger = logging.getLogger(__name__)

VALID_COMMANDS: List[str] = ["start", "stop", "toggle", "attach", "detach", "ensure_installed"]

MESSAGE_PREFIX = "[ts-enable]"


class CommandDispatcher:
    """Route sub-command names to LifecycleController operations."""

    def __init__(self, controller: LifecycleController) -> None:
        self._controller = controller
        self._handlers: Dict[str, Callable[[], Any]] = {
            name: getattr(controller, name) for name in VALID_COMMANDS
        }

    def complete(self, prefix: str) -> List[str]:
        """Sub-commands starting with ``prefix``."""
        return [name for name in VALID_COMMANDS if name.startswith(prefix)]

    def execute(self, command: str, bang: bool = False) -> bool:
        """Run a sub-command.

        Args:
            command: Sub-command name; surrounding whitespace is ignored
            bang: Let exceptions from the command propagate

        Returns:
            True if the command ran successfully
        """
        name = command.strip()
        handler = self._handlers.get(name)
        if handler is None:
            error = CommandError(name, VALID_COMMANDS)
            logger.warning(error.message)
            self._controller.host.notify(f"{MESSAGE_PREFIX} {error.message}", logging.WARNING)
            return False

        if bang:
            handler()
            return True

        try:
            handler()
        except Exception as e:
            logger.error(f'Command "{name}" failed: {e}')
            self._controller.host.notify(f'{MESSAGE_PREFIX} Command "{name}" failed', logging.ERROR)
            return False

        return True
