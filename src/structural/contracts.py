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

"""Opt-in verification of the isomorphism law around generated conversions.

Verification is off by default. Set ``STRUCTURAL_VERIFY=1`` or use
:func:`verification_enabled` to make every attached ``to``/``from_`` call
check that converting back reproduces its input::

    with verification_enabled():
        Book.from_(("T", (3, ())))
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps

from .errors import IsomorphismViolationError

__all__ = [
    "disable_verification",
    "enable_verification",
    "verification_active",
    "verification_enabled",
    "verified",
]

_ENV_FLAG = "STRUCTURAL_VERIFY"
_forced_state: bool | None = None

type ToFunction = Callable[[object], object]
type FromFunction = Callable[[type, object], object]


def _coerce_flag(value: str | None) -> bool:
    if value is None:
        return False
    lowered = value.strip().lower()
    return lowered not in {"", "0", "false", "off", "no"}


def verification_active() -> bool:
    """Return ``True`` when conversions should check the round-trip law."""

    if _forced_state is not None:
        return _forced_state
    return _coerce_flag(os.getenv(_ENV_FLAG))


def enable_verification() -> None:
    """Force verification on."""

    global _forced_state
    _forced_state = True


def disable_verification() -> None:
    """Force verification off."""

    global _forced_state
    _forced_state = False


@contextmanager
def verification_enabled(*, active: bool = True) -> Iterator[None]:
    """Temporarily set the verification flag inside a ``with`` block."""

    global _forced_state
    previous = _forced_state
    _forced_state = active
    try:
        yield
    finally:
        _forced_state = previous


def verified(
    owner: type, to: ToFunction, from_: FromFunction
) -> tuple[ToFunction, classmethod[object, [object], object]]:
    """Wrap a generated conversion pair with round-trip checks.

    ``to`` and ``from_`` are the plain generated functions; ``from_`` takes
    the owning class first. The checks call the unwrapped functions, so a
    verified call never verifies recursively.

    Returns:
        The wrapped ``to`` function and the wrapped ``from_`` as a
        ``classmethod``.
    """

    @wraps(to)
    def checked_to(self: object) -> object:
        canonical = to(self)
        if verification_active():
            restored = from_(owner, canonical)
            if restored != self:
                raise IsomorphismViolationError(
                    f"{owner.__qualname__}.from_(to(value)) does not equal value.",
                    subject=self,
                    result=restored,
                )
        return canonical

    @wraps(from_)
    def checked_from(cls: type, s: object) -> object:
        value = from_(cls, s)
        if verification_active():
            canonical = to(value)
            if canonical != s:
                raise IsomorphismViolationError(
                    f"{owner.__qualname__}.to(from_(s)) does not equal s.",
                    subject=s,
                    result=canonical,
                )
        return value

    return checked_to, classmethod(checked_from)
