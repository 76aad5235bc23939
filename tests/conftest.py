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

"""Shared pytest fixtures: an in-memory editor host and grammar installer."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

import pytest

from ts_enable.config import TSEnableConfig
from ts_enable.context import TSEnableContext
from ts_enable.controller import LifecycleController, reset_controller

DEFAULT_VIEW_OPTIONS = {"foldmethod": "manual", "foldexpr": "0"}
DEFAULT_DOCUMENT_OPTIONS = {"indentexpr": ""}


class FakeHost:
    """Editor host keeping everything in dictionaries.

    Documents are ints; the view of document N is 1000 + N unless set in
    ``views``.
    """

    def __init__(
        self,
        filetypes: Optional[Dict[str, List[str]]] = None,
        installed: Iterable[str] = (),
        queries: Optional[Dict[str, Set[str]]] = None,
        bundled: Iterable[str] = (),
    ) -> None:
        self.filetypes: Dict[str, List[str]] = filetypes or {}
        self.installed: Set[str] = set(installed)
        self.queries: Dict[str, Set[str]] = queries or {}
        self.bundled: List[str] = list(bundled)
        self.no_language: Set[str] = set()

        self.current = 1
        self.document_filetypes: Dict[int, str] = {}
        self.views: Dict[int, int] = {}
        self.view_options: Dict[int, Dict[str, Any]] = {}
        self.document_options: Dict[int, Dict[str, Any]] = {}
        self.highlighting: Dict[int, str] = {}
        self.closed: Set[int] = set()

        self.notifications: List[tuple] = []
        self.add_language_calls: List[str] = []
        self.option_writes: List[tuple] = []

    # Language mapping

    def get_filetypes(self, language: str) -> List[str]:
        return list(self.filetypes.get(language, [language]))

    def get_lang(self, filetype: str) -> Optional[str]:
        if filetype in self.no_language:
            return None
        for language, filetypes in self.filetypes.items():
            if filetype in filetypes:
                return language
        return filetype

    def add_language(self, language: str) -> bool:
        self.add_language_calls.append(language)
        return language in self.installed

    def get_query(self, language: str, name: str) -> Optional[str]:
        if name in self.queries.get(language, set()):
            return f"{language}/{name}"
        return None

    # Highlighting

    def start_highlighting(self, document: int, language: str) -> None:
        self.highlighting[document] = language

    def stop_highlighting(self, document: int) -> None:
        self.highlighting.pop(document, None)

    def is_highlighting(self, document: int) -> bool:
        return document in self.highlighting

    # Documents and views

    def current_document(self) -> int:
        return self.current

    def get_filetype(self, document: int) -> str:
        return self.document_filetypes.get(document, "")

    def view_for(self, document: int) -> int:
        return self.views.get(document, 1000 + document)

    def get_view_option(self, view: int, name: str) -> Any:
        return self.view_options.setdefault(view, dict(DEFAULT_VIEW_OPTIONS)).get(name)

    def set_view_option(self, view: int, name: str, value: Any) -> None:
        self.option_writes.append(("view", view, name, value))
        self.view_options.setdefault(view, dict(DEFAULT_VIEW_OPTIONS))[name] = value

    def get_document_option(self, document: int, name: str) -> Any:
        return self.document_options.setdefault(document, dict(DEFAULT_DOCUMENT_OPTIONS)).get(name)

    def set_document_option(self, document: int, name: str, value: Any) -> None:
        self.option_writes.append(("document", document, name, value))
        self.document_options.setdefault(document, dict(DEFAULT_DOCUMENT_OPTIONS))[name] = value

    def bundled_query_paths(self) -> List[Path]:
        return [Path(p) for p in self.bundled]

    def is_valid_document(self, document: int) -> bool:
        return document not in self.closed

    def notify(self, message: str, level: int = logging.INFO) -> None:
        self.notifications.append((message, level))


class FakeInstaller:
    """Installer that marks languages installed on the host.

    Set ``gated`` to hold every install until ``release`` is set.
    """

    def __init__(self, host: FakeHost, succeed: bool = True, error: Optional[Exception] = None):
        self.host = host
        self.succeed = succeed
        self.error = error
        self.gated = False
        self.release = asyncio.Event()
        self.calls: List[List[str]] = []

    async def install(self, languages: List[str]) -> bool:
        self.calls.append(list(languages))
        if self.gated:
            await self.release.wait()
        else:
            await asyncio.sleep(0)

        if self.error is not None:
            raise self.error
        if not self.succeed:
            return False

        self.host.installed.update(languages)
        return True


@pytest.fixture
def host():
    """Host with lua/json/gleam/zimbu mappings and no installed grammars."""
    return FakeHost(
        filetypes={
            "lua": ["lua"],
            "json": ["json", "jsonc"],
            "gleam": ["gleam"],
            "zimbu": ["zimbu"],
            "markdown": ["markdown"],
        },
        queries={
            "lua": {"highlights", "folds", "indents"},
            "json": {"highlights", "folds", "indents"},
            "gleam": {"highlights", "folds", "indents"},
            "zimbu": {"highlights", "folds", "indents"},
            "markdown": {"highlights"},
        },
        bundled=[
            "/usr/share/nvim/runtime/queries/lua/highlights.scm",
            "/usr/share/nvim/runtime/queries/lua/folds.scm",
            "/usr/share/nvim/runtime/queries/json/highlights.scm",
            "/usr/share/nvim/runtime/queries/markdown/highlights.scm",
        ],
    )


@pytest.fixture
def installer(host):
    return FakeInstaller(host)


@pytest.fixture
def make_controller(host):
    """Build a LifecycleController; ``installer=None`` means no installer is present."""

    def _make(config=None, installer=None, **config_fields):
        if config is None:
            config = TSEnableConfig(**config_fields)
        context = TSEnableContext(
            host,
            config=config,
            installer=installer,
            installer_loader=lambda: None,
        )
        return LifecycleController(host, context=context)

    return _make


@pytest.fixture(autouse=True)
def isolate_environment_variables(monkeypatch):
    """Keep TS_ENABLE_* variables of the developer's shell out of tests."""
    for var in (
        "TS_ENABLE_CONFIG",
        "TS_ENABLE_PARSERS",
        "TS_ENABLE_AUTO_INSTALL",
        "TS_ENABLE_HIGHLIGHTS",
        "TS_ENABLE_FOLDS",
        "TS_ENABLE_INDENTS",
        "TS_ENABLE_PARSER_SETTINGS",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_singleton_controller():
    """Reset the singleton controller around each test."""
    reset_controller()
    yield
    reset_controller()
