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

"""Opt editor documents into syntax-tree highlighting, folding and indentation.

ts-enable decides whether and when to turn tree-sitter features on for a
document, based on a global configuration with optional per-language
overrides. Missing grammars are installed on demand through an external
installer service, once per language; hosts without an installer fall back
to the queries they bundle.

Example:
    from ts_enable import get_controller

    controller = get_controller(host)
    controller.setup({"parsers": ["json"], "highlights": True})
    controller.handle_filetype_event(document, "json")
"""

from __future__ import annotations

__version__ = "0.1.0"

from ts_enable.config import ConfigResolver, FeatureConfig, TSEnableConfig, load_config, resolve_config
from ts_enable.context import TSEnableContext
from ts_enable.controller import LifecycleController, get_controller, reset_controller
from ts_enable.engine import EnablementEngine
from ts_enable.errors import CommandError, ConfigurationError, InstallerError, TSEnableError
from ts_enable.features import FeatureApplier
from ts_enable.installer import InstallerGateway
from ts_enable.protocol import (
    DocumentFeatureState,
    HostProtocol,
    InstallerProtocol,
    LanguageAvailability,
    OptionOverride,
)
from ts_enable.registry import AvailabilityRegistry, BuiltinGrammarIndex

__all__ = [
    "__version__",
    # Configuration
    "ConfigResolver",
    "FeatureConfig",
    "TSEnableConfig",
    "load_config",
    "resolve_config",
    # State machine
    "AvailabilityRegistry",
    "BuiltinGrammarIndex",
    "EnablementEngine",
    "FeatureApplier",
    "InstallerGateway",
    "LifecycleController",
    "TSEnableContext",
    "get_controller",
    "reset_controller",
    # Protocols and data model
    "DocumentFeatureState",
    "HostProtocol",
    "InstallerProtocol",
    "LanguageAvailability",
    "OptionOverride",
    # Errors
    "CommandError",
    "ConfigurationError",
    "InstallerError",
    "TSEnableError",
]
