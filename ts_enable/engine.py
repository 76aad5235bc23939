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

"""Per-document enablement state machine.

For a filetype managed by ts-enable, ``attach`` walks:

    UNKNOWN --(grammar already registered)--------------> AVAILABLE
    UNKNOWN --(async install succeeds)------------------> AVAILABLE
    UNKNOWN --(async install fails)---------------------> UNAVAILABLE
    UNKNOWN --(no installer, queries bundled with host)-> AVAILABLE

AVAILABLE and UNAVAILABLE are terminal. Documents attaching while an install
is in flight are queued on that install instead of starting another one.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from ts_enable.config import FeatureConfig
from ts_enable.context import TSEnableContext
from ts_enable.features import FeatureApplier
from ts_enable.protocol import Document, LanguageAvailability

logger = logging.getLogger(__name__)


class EnablementEngine:
    """Decide whether and when to start features for a document."""

    def __init__(self, context: TSEnableContext, applier: FeatureApplier) -> None:
        self._ctx = context
        self._applier = applier
        # language -> documents waiting on its install
        self._waiters: Dict[str, List[Tuple[Document, str]]] = {}

    def waiting_documents(self, language: str) -> List[Document]:
        return [document for document, _ in self._waiters.get(language, [])]

    def language_for(self, filetype: str) -> Optional[str]:
        try:
            language = self._ctx.host.get_lang(filetype)
        except Exception as e:
            logger.debug(f"No language for filetype {filetype}: {e}")
            return None
        return language or None

    def attach(self, document: Document, filetype: str) -> Optional[LanguageAvailability]:
        """Enable features for a document, installing the grammar if needed.

        Args:
            document: Host document handle
            filetype: Filetype of the document

        Returns:
            Availability of the filetype after this call, or None if the
            filetype is not managed by ts-enable
        """
        ctx = self._ctx
        ctx.ensure_initialized()

        state = ctx.registry.get(filetype)
        if state is None:
            return None

        language = self.language_for(filetype)
        if language is None:
            return None

        config = ctx.resolve(language)
        use_installer = config.auto_install and ctx.gateway.is_present()
        builtin = language in ctx.builtin

        if state == LanguageAvailability.UNKNOWN and self._grammar_ready(language):
            # Bundled grammars go through the installer when one can run
            if not (builtin and use_installer):
                state = LanguageAvailability.AVAILABLE
                ctx.registry.set(filetype, state)

        if state == LanguageAvailability.AVAILABLE:
            self._start(document, language, config)
            return state

        if state == LanguageAvailability.UNAVAILABLE:
            return state

        if use_installer:
            self._install(document, filetype, language)
            return state

        if builtin:
            logger.debug(f"Using bundled queries for {language}")
            state = LanguageAvailability.AVAILABLE
            ctx.registry.set(filetype, state)
            self._start(document, language, config)

        return state

    def on_installed(self, language: str, success: bool) -> None:
        """Install completion: update the registry and start waiting documents."""
        ctx = self._ctx
        waiters = self._waiters.pop(language, [])

        available = (success and self._grammar_ready(language)) or language in ctx.builtin
        if not success and available:
            logger.info(f"Install of {language} failed, falling back to bundled queries")

        for filetype in self._filetypes_of(language, waiters):
            if available:
                ctx.registry.set(filetype, LanguageAvailability.AVAILABLE)
            elif ctx.registry.get(filetype) != LanguageAvailability.AVAILABLE:
                ctx.registry.set(filetype, LanguageAvailability.UNAVAILABLE)

        if not available:
            logger.warning(f"Grammar for {language} is unavailable")
            return

        if not ctx.attach_enabled:
            logger.debug(f"Attach disabled, not starting {len(waiters)} waiting documents")
            return

        config = ctx.resolve(language)
        for document, _ in waiters:
            try:
                if not ctx.host.is_valid_document(document):
                    continue
                self._applier.start(document, language, config)
            except Exception as e:
                logger.warning(f"Failed to start {language} features for document {document}: {e}")

    def _install(self, document: Document, filetype: str, language: str) -> None:
        waiters = self._waiters.setdefault(language, [])
        if (document, filetype) not in waiters:
            waiters.append((document, filetype))

        if self._ctx.gateway.install(language, self.on_installed) is None:
            # No event loop to run on; the filetype stays UNKNOWN
            self._waiters.pop(language, None)

    def _start(self, document: Document, language: str, config: FeatureConfig) -> None:
        try:
            self._applier.start(document, language, config)
        except Exception as e:
            logger.warning(f"Failed to start {language} features for document {document}: {e}")

    def _grammar_ready(self, language: str) -> bool:
        try:
            return self._ctx.host.add_language(language) is True
        except Exception as e:
            logger.debug(f"Grammar for {language} not registered: {e}")
            return False

    def _filetypes_of(self, language: str, waiters: List[Tuple[Document, str]]) -> List[str]:
        filetypes = [filetype for _, filetype in waiters]
        try:
            filetypes.extend(self._ctx.host.get_filetypes(language) or [])
        except Exception as e:
            logger.debug(f"Could not get filetypes for {language}: {e}")
        return [ft for ft in dict.fromkeys(filetypes) if ft in self._ctx.registry]
