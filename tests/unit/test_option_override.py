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

"""Tests for OptionOverride and DocumentFeatureState."""

from ts_enable.protocol import DocumentFeatureState, OptionOverride, OptionScope


class TestOptionOverride:
    """Tests for save-once / restore semantics."""

    def test_apply_saves_prior_and_writes_target(self, host):
        """Test the first apply records the current value."""
        override = OptionOverride("foldmethod", OptionScope.VIEW, "expr")

        assert override.apply(host, 1001) is True
        assert override.applied
        assert override.prior == "manual"
        assert host.get_view_option(1001, "foldmethod") == "expr"

    def test_apply_noop_when_already_target(self, host):
        """Test nothing is saved when the value already matches."""
        host.set_view_option(1001, "foldmethod", "expr")
        override = OptionOverride("foldmethod", OptionScope.VIEW, "expr")

        assert override.apply(host, 1001) is False
        assert not override.applied

    def test_reapply_keeps_first_prior(self, host):
        """Test a second apply never overwrites the saved value."""
        override = OptionOverride("indentexpr", OptionScope.DOCUMENT, "ts()")
        override.apply(host, 1)

        # User changes the option while the override is applied
        host.set_document_option(1, "indentexpr", "user()")
        assert override.apply(host, 1) is True

        assert override.prior == ""
        assert host.get_document_option(1, "indentexpr") == "ts()"

    def test_revert_restores_and_clears(self, host):
        """Test revert writes back the prior value once."""
        override = OptionOverride("indentexpr", OptionScope.DOCUMENT, "ts()")
        host.set_document_option(1, "indentexpr", "mine()")
        override.apply(host, 1)

        assert override.revert(host) is True
        assert host.get_document_option(1, "indentexpr") == "mine()"
        assert not override.applied
        assert override.revert(host) is False

    def test_revert_unapplied_is_noop(self, host):
        """Test reverting an override that never applied writes nothing."""
        override = OptionOverride("foldexpr", OptionScope.VIEW, "x")
        assert override.revert(host) is False
        assert host.option_writes == []


class TestDocumentFeatureState:
    """Tests for DocumentFeatureState."""

    def test_override_reuses_record(self):
        """Test the same option on the same handle maps to one record."""
        state = DocumentFeatureState()
        first = state.override("foldexpr", OptionScope.VIEW, "a", 1001)
        second = state.override("foldexpr", OptionScope.VIEW, "b", 1001)

        assert first is second
        assert second.target == "b"

    def test_override_per_handle(self):
        """Test each view gets its own record for the same option."""
        state = DocumentFeatureState()
        first = state.override("foldmethod", OptionScope.VIEW, "expr", 10)
        second = state.override("foldmethod", OptionScope.VIEW, "expr", 20)

        assert first is not second
        assert len(state.overrides) == 2

    def test_saved_values(self, host):
        """Test saved_values lists applied overrides only."""
        state = DocumentFeatureState()
        state.override("foldmethod", OptionScope.VIEW, "expr", 1001).apply(host, 1001)
        state.override("foldexpr", OptionScope.VIEW, "0", 1001)

        assert state.saved_values() == {("foldmethod", 1001): "manual"}
