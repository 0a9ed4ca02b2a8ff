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

"""Tests for name metadata."""

from __future__ import annotations

import ast

import pytest

from structural.canonical import Empty, Field, List, Struct, Sum
from structural.metadata import metadata_expr
from tests._fixtures import Record, Sample, Token, Unit, Void, declaration_of

pytestmark = pytest.mark.core


def _names(chain: object) -> list[str]:
    names: list[str] = []
    while isinstance(chain, List):
        names.append(chain.head.name)
        chain = chain.tail
    assert chain == Empty()
    return names


def test_product_metadata_source() -> None:
    declaration = declaration_of(
        """
        class Record:
            foo: str
            bar: int
        """
    )

    assert ast.unparse(metadata_expr(declaration)) == (
        "Struct(name='Record', properties=List(head=Field(name='foo'), "
        "tail=List(head=Field(name='bar'), tail=Empty())))"
    )


def test_sum_metadata_lists_case_names() -> None:
    declaration = declaration_of(
        """
        class Sample(Variant):
            a = case(x=int)
            b = case()
        """
    )

    assert ast.unparse(metadata_expr(declaration)) == (
        "Sum(name='Sample', cases=List(head=Field(name='a'), "
        "tail=List(head=Field(name='b'), tail=Empty())))"
    )


def test_attached_product_metadata() -> None:
    assert Record.structure == Struct(
        name="Record",
        properties=List(
            head=Field(name="foo"),
            tail=List(head=Field(name="bar"), tail=Empty()),
        ),
    )


def test_attached_sum_metadata_keeps_every_case_name() -> None:
    assert Token.structure.name == "Token"
    assert _names(Token.structure.cases) == ["number", "pair", "word", "end"]
    assert _names(Sample.structure.cases) == ["a", "b"]


def test_degenerate_metadata() -> None:
    assert Unit.structure == Struct(name="Unit", properties=Empty())
    assert Void.structure == Sum(name="Void", cases=Empty())
