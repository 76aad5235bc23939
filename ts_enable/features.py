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

"""Apply and revert highlighting, folding and indentation for one document.

Each feature is gated on the language actually providing the matching query
(``highlights``, ``folds``, ``indents``). A missing query, or a host error
while applying one feature, skips only that feature.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ts_enable.config import FeatureConfig
from ts_enable.protocol import Document, DocumentFeatureState, HostProtocol, OptionScope

logger = logging.getLogger(__name__)

HIGHLIGHTS_QUERY = "highlights"
FOLDS_QUERY = "folds"
INDENTS_QUERY = "indents"

FOLD_METHOD = "expr"
FOLD_EXPR = "v:lua.vim.treesitter.foldexpr()"
INDENT_EXPR = "v:lua.require'nvim-treesitter'.indentexpr()"


class FeatureApplier:
    """Owns the DocumentFeatureState of every started document."""

    def __init__(
        self,
        host: HostProtocol,
        fold_method: str = FOLD_METHOD,
        fold_expr: str = FOLD_EXPR,
        indent_expr: str = INDENT_EXPR,
    ) -> None:
        self._host = host
        self.fold_method = fold_method
        self.fold_expr = fold_expr
        self.indent_expr = indent_expr
        self._states: Dict[Document, DocumentFeatureState] = {}

    def state(self, document: Document) -> Optional[DocumentFeatureState]:
        return self._states.get(document)

    def is_active(self, document: Document) -> bool:
        state = self._states.get(document)
        return state is not None and state.active

    def has_query(self, language: str, name: str) -> bool:
        """Probe the syntax-tree engine for a query; errors count as absent."""
        try:
            return self._host.get_query(language, name) is not None
        except Exception as e:
            logger.debug(f"No {name} query for {language}: {e}")
            return False

    def start(self, document: Document, language: str, config: FeatureConfig) -> DocumentFeatureState:
        """Enable the configured features for a document.

        Args:
            document: Host document handle
            language: Tree-sitter language of the document
            config: Effective flags for the language

        Returns:
            The document's feature state
        """
        state = self._states.get(document)
        if state is None:
            state = DocumentFeatureState()
            self._states[document] = state
        state.active = True

        if config.highlights and self.has_query(language, HIGHLIGHTS_QUERY):
            try:
                self._host.start_highlighting(document, language)
            except Exception as e:
                logger.warning(f"Failed to start highlighting for {language}: {e}")

        if config.folds and self.has_query(language, FOLDS_QUERY):
            try:
                view = self._host.view_for(document)
                self._override(state, "foldmethod", OptionScope.VIEW, self.fold_method, view)
                self._override(state, "foldexpr", OptionScope.VIEW, self.fold_expr, view)
            except Exception as e:
                logger.warning(f"Failed to set fold options for {language}: {e}")

        if config.indents and self.has_query(language, INDENTS_QUERY):
            try:
                self._override(state, "indentexpr", OptionScope.DOCUMENT, self.indent_expr, document)
            except Exception as e:
                logger.warning(f"Failed to set indent expression for {language}: {e}")

        logger.debug(f"Started {language} features for document {document}")
        return state

    def stop(self, document: Document) -> None:
        """Stop highlighting and restore every overridden option.

        Safe to call on a document that was never started.
        """
        state = self._states.pop(document, None)

        try:
            if self._host.is_highlighting(document):
                self._host.stop_highlighting(document)
        except Exception as e:
            logger.warning(f"Failed to stop highlighting for document {document}: {e}")

        if state is None:
            return

        state.active = False
        for override in state.overrides.values():
            try:
                override.revert(self._host)
            except Exception as e:
                logger.warning(f"Failed to restore {override.name} for document {document}: {e}")

        state.overrides.clear()
        logger.debug(f"Stopped features for document {document}")

    def _override(
        self, state: DocumentFeatureState, name: str, scope: OptionScope, target: Any, handle: Any
    ) -> None:
        if state.override(name, scope, target, handle).apply(self._host, handle):
            logger.debug(f"Set {name}={target!r}")
