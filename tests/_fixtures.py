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

"""Shared derived types.

Derivation reads class source, so the fixtures live at module level where
``inspect`` can find them.
"""

from __future__ import annotations

import ast
import textwrap
from dataclasses import dataclass
from typing import ClassVar

from structural import Declaration, Variant, case, extract_declaration, structural


def declaration_of(source: str) -> Declaration:
    """Extract the declaration of the first statement in ``source``."""

    tree = ast.parse(textwrap.dedent(source).strip())
    return extract_declaration(tree.body[0])


@structural
class Record:
    foo: str
    bar: int


@structural
class Book:
    """A product with a default and a computed member."""

    title: str
    pages: int = 0

    @property
    def short(self) -> bool:
        return self.pages < 100


@structural
class Unit:
    pass


@structural
class Address:
    street: str
    city: str


@structural
class Person:
    name: str
    address: Address
    nickname: str | None = None


@structural
class Account:
    kind: ClassVar[str] = "account"
    owner: str
    balance: int = 0
    total = property(lambda self: self.balance)

    def deposit(self, amount: int) -> Account:
        return Account(self.owner, self.balance + amount)


@structural(frozen=True, slots=True)
class Point:
    x: int
    y: int


@structural
@dataclass(frozen=True)
class Money:
    amount: int
    currency: str


@structural
class Box[T]:
    item: T


@structural
class Sample(Variant):
    a = case(x=int)
    b = case()


@structural
class Token(Variant):
    number = case(int)
    pair = case(int, label=str)
    word = case(text=str)
    end = case()


@structural
class Shape(Variant):
    circle = case(radius=float)
    rect = case(width=float, height=float)
    point = case()

    def describe(self) -> str:
        return type(self).__name__


@structural
class Void(Variant):
    """A sum without cases."""


@structural
class Drawing:
    title: str
    shape: Shape


@structural
class Tree(Variant):
    leaf = case(int)
    node = case(left="Tree", right="Tree")
