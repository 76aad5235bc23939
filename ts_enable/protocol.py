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

"""Protocol types for ts-enable.

Defines the collaborator interfaces (editor host, grammar installer) and the
data structures tracking per-language availability and per-document option
overrides.

Documents and views are opaque handles owned by the host (buffer and window
numbers in Neovim); ts-enable only uses them as dictionary keys and passes
them back to the host.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Dict, Hashable, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

Document = Hashable
View = Hashable


class LanguageAvailability(Enum):
    """Availability of a grammar for one filetype."""

    UNKNOWN = "unknown"  # Not checked yet
    AVAILABLE = "available"  # Usable now
    UNAVAILABLE = "unavailable"  # Install failed or declined; never retried automatically


class OptionScope(str, Enum):
    """Where a host option lives."""

    VIEW = "view"
    DOCUMENT = "document"


@runtime_checkable
class HostProtocol(Protocol):
    """Editor host surface consumed by ts-enable.

    Query probes (``get_query``) return ``None`` when a language does not
    provide the query. Implementations may also raise; callers treat both the
    same way.
    """

    def get_filetypes(self, language: str) -> List[str]:
        """Filetypes mapped to a language."""
        ...

    def get_lang(self, filetype: str) -> Optional[str]:
        """Language for a filetype, or None."""
        ...

    def add_language(self, language: str) -> bool:
        """Register the grammar for a language; True if it is usable."""
        ...

    def get_query(self, language: str, name: str) -> Optional[Any]:
        """Query object (highlights, folds, indents) or None."""
        ...

    def start_highlighting(self, document: Document, language: str) -> None:
        ...

    def stop_highlighting(self, document: Document) -> None:
        ...

    def is_highlighting(self, document: Document) -> bool:
        ...

    def current_document(self) -> Document:
        ...

    def get_filetype(self, document: Document) -> str:
        ...

    def view_for(self, document: Document) -> View:
        """View currently presenting the document."""
        ...

    def get_view_option(self, view: View, name: str) -> Any:
        ...

    def set_view_option(self, view: View, name: str, value: Any) -> None:
        ...

    def get_document_option(self, document: Document, name: str) -> Any:
        ...

    def set_document_option(self, document: Document, name: str, value: Any) -> None:
        ...

    def bundled_query_paths(self) -> Iterable[Path]:
        """Paths of query files shipped with the host runtime."""
        ...

    def is_valid_document(self, document: Document) -> bool:
        ...

    def notify(self, message: str, level: int = logging.INFO) -> None:
        """Show a message to the user."""
        ...


@runtime_checkable
class InstallerProtocol(Protocol):
    """External grammar installer service."""

    def install(self, languages: List[str]) -> Awaitable[Any]:
        """Install grammars; ``False`` or an exception means failure."""
        ...


@dataclass
class OptionOverride:
    """A host option ts-enable has overridden.

    ``prior`` is captured the first time the override is applied and kept
    until the override is reverted, so re-applying never loses the user's
    original value.
    """

    name: str
    scope: OptionScope
    target: Any
    handle: Any = None  # View or document the option was written on
    prior: Any = None
    applied: bool = False

    def apply(self, host: HostProtocol, handle: Any) -> bool:
        """Write ``target`` if the current value differs.

        Returns:
            True if the option was written
        """
        current = self._read(host, handle)
        if current == self.target:
            return False

        if not self.applied:
            self.prior = current
            self.handle = handle
            self.applied = True

        self._write(host, handle, self.target)
        return True

    def revert(self, host: HostProtocol) -> bool:
        """Restore the prior value if this override was applied."""
        if not self.applied:
            return False

        self._write(host, self.handle, self.prior)
        self.prior = None
        self.handle = None
        self.applied = False
        return True

    def _read(self, host: HostProtocol, handle: Any) -> Any:
        if self.scope == OptionScope.VIEW:
            return host.get_view_option(handle, self.name)
        return host.get_document_option(handle, self.name)

    def _write(self, host: HostProtocol, handle: Any, value: Any) -> None:
        if self.scope == OptionScope.VIEW:
            host.set_view_option(handle, self.name, value)
        else:
            host.set_document_option(handle, self.name, value)


@dataclass
class DocumentFeatureState:
    """Presentation state ts-enable holds for one document.

    Overrides are keyed by ``(option name, handle)``: a document shown in
    several views over its lifetime keeps one record, and one prior value,
    per view.
    """

    active: bool = False
    overrides: Dict[Tuple[str, Any], OptionOverride] = field(default_factory=dict)

    def override(self, name: str, scope: OptionScope, target: Any, handle: Any = None) -> OptionOverride:
        """Get or create the override record for an option on one handle."""
        key = (name, handle)
        record = self.overrides.get(key)
        if record is None:
            record = OptionOverride(name=name, scope=scope, target=target)
            self.overrides[key] = record
        else:
            record.target = target
        return record

    def saved_values(self) -> Dict[Tuple[str, Any], Any]:
        """Prior values of all applied overrides, by ``(name, handle)``."""
        return {key: o.prior for key, o in self.overrides.items() if o.applied}
