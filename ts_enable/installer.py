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

"""Async boundary to the external grammar installer.

The installer is optional. It is either passed in explicitly or discovered
through the ``ts_enable.installers`` entry point group, whose entries are
factories returning an object with an ``install(languages)`` method:

    [project.entry-points."ts_enable.installers"]
    nvim-treesitter = "my_package.installer:create_installer"

When no installer can be found, every install request is a no-op and
ts-enable falls back to the grammars bundled with the host.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from importlib.metadata import entry_points
from typing import Callable, Dict, Iterable, List, Optional

from ts_enable.errors import ErrorCategory, InstallerError
from ts_enable.protocol import InstallerProtocol

logger = logging.getLogger(__name__)

INSTALLER_ENTRY_POINT_GROUP = "ts_enable.installers"

CompletionCallback = Callable[[str, bool], None]


def load_installer_from_entry_points(name: Optional[str] = None) -> Optional[InstallerProtocol]:
    """Load the first installer registered under ``ts_enable.installers``.

    Args:
        name: Optional entry point name to restrict the lookup to

    Returns:
        Installer instance, or None if no entry point loads
    """
    try:
        eps = entry_points(group=INSTALLER_ENTRY_POINT_GROUP)
    except Exception as e:
        logger.debug(f"No installer entry points found: {e}")
        return None

    for ep in eps:
        if name is not None and ep.name != name:
            continue
        try:
            factory = ep.load()
            installer = factory()
            logger.debug(f"Loaded grammar installer '{ep.name}'")
            return installer
        except Exception as e:
            logger.warning(f"Failed to load grammar installer '{ep.name}': {e}")

    return None


class InstallerGateway:
    """Dispatch grammar installs with at most one in-flight install per language.

    Example:
        gateway = InstallerGateway()
        if gateway.is_present():
            gateway.install("gleam", lambda lang, ok: print(lang, ok))
            await gateway.wait("gleam")
    """

    def __init__(
        self,
        installer: Optional[InstallerProtocol] = None,
        loader: Optional[Callable[[], Optional[InstallerProtocol]]] = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            installer: Installer to use; skips discovery when given
            loader: Discovery function (default: entry point lookup)
        """
        self._installer = installer
        self._loader = loader or load_installer_from_entry_points
        self._checked = installer is not None
        self._pending: Dict[str, asyncio.Task] = {}
        self._callbacks: Dict[str, List[CompletionCallback]] = {}
        self.errors: Dict[str, InstallerError] = {}
        self.missing_error: Optional[InstallerError] = None

    def is_present(self) -> bool:
        """Whether an installer is available. Discovery runs only once."""
        if not self._checked:
            self._checked = True
            cause = None
            try:
                self._installer = self._loader()
            except Exception as e:
                logger.debug(f"Installer discovery failed: {e}")
                self._installer = None
                cause = e

            if self._installer is None:
                self.missing_error = InstallerError(
                    "Grammar installer not found, automatic installation disabled",
                    category=ErrorCategory.INSTALLER_MISSING,
                    recovery_hint=f"Install a package that registers a '{INSTALLER_ENTRY_POINT_GROUP}' entry point",
                    cause=cause,
                )
                logger.warning(self.missing_error.message)

        return self._installer is not None

    @property
    def skip_installer(self) -> bool:
        return not self.is_present()

    def pending(self, language: str) -> Optional[asyncio.Task]:
        """In-flight install task for a language, if any."""
        return self._pending.get(language)

    @property
    def pending_languages(self) -> List[str]:
        return list(self._pending)

    def install(
        self, language: str, on_complete: Optional[CompletionCallback] = None
    ) -> Optional[asyncio.Task]:
        """Install one language in the background.

        A request for a language that is already being installed joins the
        in-flight install; ``on_complete`` is still called when it finishes.

        Returns:
            The install task, or None if no installer or event loop is available
        """
        return self._dispatch([language], on_complete)

    def install_many(
        self, languages: Iterable[str], on_complete: Optional[CompletionCallback] = None
    ) -> Optional[asyncio.Task]:
        """Install several languages with a single installer call.

        ``on_complete`` is called once per language.
        """
        return self._dispatch(languages, on_complete)

    async def wait(self, language: Optional[str] = None) -> None:
        """Wait for in-flight installs (one language, or all of them)."""
        while True:
            if language is not None:
                task = self._pending.get(language)
                tasks = {task} if task is not None else set()
            else:
                tasks = set(self._pending.values())

            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    def _dispatch(
        self, languages: Iterable[str], on_complete: Optional[CompletionCallback]
    ) -> Optional[asyncio.Task]:
        languages = [lang for lang in dict.fromkeys(languages) if lang]
        if not languages or not self.is_present():
            return None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, cannot install {', '.join(languages)}")
            return None

        if on_complete is not None:
            for language in languages:
                callbacks = self._callbacks.setdefault(language, [])
                if on_complete not in callbacks:
                    callbacks.append(on_complete)

        fresh = [lang for lang in languages if lang not in self._pending]
        if not fresh:
            logger.debug(f"Install already in flight for {', '.join(languages)}")
            return self._pending[languages[0]]

        task = loop.create_task(self._run(fresh))
        for language in fresh:
            self._pending[language] = task

        logger.info(f"Installing grammars: {', '.join(fresh)}")
        return task

    async def _run(self, languages: List[str]) -> bool:
        try:
            success = await self._invoke(languages)
        finally:
            for language in languages:
                self._pending.pop(language, None)

        for language in languages:
            for callback in self._callbacks.pop(language, []):
                try:
                    callback(language, success)
                except Exception as e:
                    logger.error(f"Install completion callback failed for {language}: {e}")

        return success

    async def _invoke(self, languages: List[str]) -> bool:
        try:
            result = self._installer.install(list(languages))
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = InstallerError(
                f"Installer failed for {', '.join(languages)}: {e}", languages=languages, cause=e
            )
            for language in languages:
                self.errors[language] = error
            logger.warning(error.message)
            return False

        if result is False:
            logger.warning(f"Installer reported failure for {', '.join(languages)}")
            return False

        logger.info(f"Installer finished for {', '.join(languages)}")
        return True
