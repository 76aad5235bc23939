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

"""Grammar availability registry and builtin query index."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Union

from ts_enable.protocol import LanguageAvailability

logger = logging.getLogger(__name__)


class AvailabilityRegistry:
    """Filetype -> LanguageAvailability.

    Only filetypes of configured languages have an entry. A filetype without
    an entry is not managed by ts-enable.
    """

    def __init__(self) -> None:
        self._states: Dict[str, LanguageAvailability] = {}

    def seed(self, languages: Iterable[str], get_filetypes: Callable[[str], Iterable[str]]) -> int:
        """Mark every filetype of the given languages UNKNOWN.

        Filetypes that already have an entry keep their state.

        Returns:
            Number of new entries
        """
        added = 0
        for language in languages:
            try:
                filetypes = list(get_filetypes(language) or [])
            except Exception as e:
                logger.warning(f"Could not get filetypes for {language}: {e}")
                continue

            for filetype in filetypes:
                if filetype not in self._states:
                    self._states[filetype] = LanguageAvailability.UNKNOWN
                    added += 1

        logger.debug(f"Availability registry seeded with {added} filetypes")
        return added

    def get(self, filetype: str) -> Optional[LanguageAvailability]:
        return self._states.get(filetype)

    def set(self, filetype: str, state: LanguageAvailability) -> None:
        old = self._states.get(filetype)
        self._states[filetype] = state
        if old != state:
            logger.debug(f"Filetype {filetype}: {old.value if old else None} -> {state.value}")

    def filetypes_for(self, state: LanguageAvailability) -> List[str]:
        return [ft for ft, s in self._states.items() if s == state]

    def snapshot(self) -> Dict[str, LanguageAvailability]:
        return dict(self._states)

    def __contains__(self, filetype: object) -> bool:
        return filetype in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)


class BuiltinGrammarIndex:
    """Languages whose highlight queries ship with the host."""

    QUERY_DIR = "queries"
    HIGHLIGHTS_FILE = "highlights.scm"

    def __init__(self, languages: Iterable[str] = ()) -> None:
        self._languages: FrozenSet[str] = frozenset(languages)

    @classmethod
    def scan(cls, paths: Iterable[Union[str, Path]]) -> "BuiltinGrammarIndex":
        """Build the index from bundled query file paths.

        Every ``.../queries/<language>/highlights.scm`` contributes
        ``<language>``; other paths are ignored.
        """
        languages = set()
        for raw in paths:
            path = Path(raw)
            if path.name != cls.HIGHLIGHTS_FILE:
                continue
            if path.parent.parent.name != cls.QUERY_DIR:
                continue
            languages.add(path.parent.name)

        logger.debug(f"Builtin highlight queries found for: {sorted(languages)}")
        return cls(languages)

    @property
    def languages(self) -> FrozenSet[str]:
        return self._languages

    def contains(self, language: str) -> bool:
        return language in self._languages

    def __contains__(self, language: object) -> bool:
        return language in self._languages

    def __len__(self) -> int:
        return len(self._languages)
