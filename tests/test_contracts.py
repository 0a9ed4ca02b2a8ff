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

"""Tests for round-trip verification of generated conversions."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

import structural.contracts as contracts_module
from structural import IsomorphismViolationError, structural
from structural.contracts import (
    disable_verification,
    enable_verification,
    verification_active,
    verification_enabled,
)
from tests._fixtures import Record, Sample


@structural
class Opaque:
    token: str

    def __eq__(self, other: object) -> bool:
        return False


@structural
class Normalized:
    code: str

    def __post_init__(self) -> None:
        self.code = self.code.lower()


@pytest.fixture(autouse=True)
def reset_verification_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure verification toggles reset between tests."""

    monkeypatch.delenv("STRUCTURAL_VERIFY", raising=False)
    contracts_module._forced_state = None
    yield
    contracts_module._forced_state = None


def test_verification_is_off_by_default() -> None:
    assert not verification_active()


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1", True), ("true", True), ("yes", True), ("0", False), ("off", False), ("", False)],
)
def test_environment_flag(
    monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
) -> None:
    monkeypatch.setenv("STRUCTURAL_VERIFY", value)

    assert verification_active() is expected


def test_forced_state_overrides_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STRUCTURAL_VERIFY", "1")

    disable_verification()
    assert not verification_active()
    enable_verification()
    assert verification_active()


def test_context_manager_restores_previous_state() -> None:
    with verification_enabled():
        assert verification_active()
        with verification_enabled(active=False):
            assert not verification_active()
        assert verification_active()
    assert not verification_active()


def test_lawful_conversions_pass_verification() -> None:
    with verification_enabled():
        assert Record.from_(Record("x", 1).to()) == Record("x", 1)
        assert Sample.from_(Sample.a(x=1).to()) == Sample.a(x=1)
        assert Sample.from_(Sample.b.to()) is Sample.b


def test_to_reports_broken_equality() -> None:
    value = Opaque("t")

    assert value.to() == ("t", ())
    with verification_enabled(), pytest.raises(IsomorphismViolationError) as excinfo:
        value.to()

    assert excinfo.value.subject is value
    assert isinstance(excinfo.value, AssertionError)


def test_from_reports_lossy_construction() -> None:
    assert Normalized.from_(("ABC", ())).code == "abc"

    with verification_enabled(), pytest.raises(
        IsomorphismViolationError, match="to\\(from_\\(s\\)\\)"
    ) as excinfo:
        Normalized.from_(("ABC", ()))

    assert excinfo.value.subject == ("ABC", ())
    assert excinfo.value.result == ("abc", ())
