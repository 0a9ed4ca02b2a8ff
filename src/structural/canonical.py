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

"""Canonical container vocabulary every derived type maps into.

Products map to right-nested pair lists and sums to right-nested binary
choices::

    Struct[List[Field[str], List[Field[int], Empty]]]
    Sum[Choice[List[Field[int], Empty], Choice[Empty, Nothing]]]

The classes double as type constructors (for the canonical type expression
attached as ``Structure``) and as immutable value containers (for canonical
values and metadata).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Never, assert_never, final

__all__ = [
    "CANONICAL_NAMESPACE",
    "Choice",
    "Empty",
    "Field",
    "First",
    "List",
    "Nothing",
    "Second",
    "Struct",
    "Sum",
]


@dataclass(frozen=True)
class Empty:
    """End of a product chain; every instance is equal to every other."""


@dataclass(frozen=True)
class List[H, T]:
    """One element of a product followed by the rest of the chain."""

    head: H
    tail: T


@dataclass(frozen=True)
class Field[V]:
    """A labelled leaf of a product.

    Metadata omits ``value`` (``Field(name="title")``); canonical values of
    labelled sum parameters carry both.
    """

    name: str
    value: V | None = None


class Choice[L, R]:
    """Binary alternative: this case (``First``) or one of the rest (``Second``)."""

    __slots__ = ()

    @staticmethod
    def first[A](value: A) -> First[A, Never]:
        return First(value)

    @staticmethod
    def second[B](value: B) -> Second[Never, B]:
        return Second(value)


@dataclass(frozen=True)
class First[L, R](Choice[L, R]):
    value: L


@dataclass(frozen=True)
class Second[L, R](Choice[L, R]):
    value: R


@final
class Nothing:
    """Exhausted alternatives. Only ever used as a type argument."""

    __slots__ = ()

    def __new__(cls) -> Never:
        raise TypeError("Nothing has no values")


@dataclass(frozen=True)
class Struct[P]:
    """Canonical form of a product type named ``name``."""

    name: str
    properties: P


@dataclass(frozen=True)
class Sum[C]:
    """Canonical form of a sum type named ``name``."""

    name: str
    cases: C


CANONICAL_NAMESPACE: Final[Mapping[str, object]] = MappingProxyType(
    {
        "Choice": Choice,
        "Empty": Empty,
        "Field": Field,
        "First": First,
        "List": List,
        "Nothing": Nothing,
        "Second": Second,
        "Struct": Struct,
        "Sum": Sum,
        "assert_never": assert_never,
    }
)
"""Names generated code may reference. Nothing else is in scope for it."""
