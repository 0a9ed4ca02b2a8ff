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

"""Tests for generic algorithms over canonical values."""

from __future__ import annotations

import pytest

from structural.canonical import Empty, Field, First, List, Second, Struct, Sum
from structural.generic import (
    edit,
    equal,
    is_structural,
    leaves,
    rebuild,
    show,
    view,
)
from tests._fixtures import (
    Address,
    Book,
    Box,
    Drawing,
    Person,
    Record,
    Sample,
    Shape,
    Token,
    Tree,
    Unit,
)


def _upper(path: tuple[str | int, ...], leaf: object) -> object:
    return leaf.upper() if isinstance(leaf, str) else leaf


def test_is_structural() -> None:
    assert is_structural(Record)
    assert is_structural(Record("x", 1))
    assert is_structural(Sample.b)
    assert is_structural(Shape.circle)
    assert not is_structural(3)
    assert not is_structural(int)


def test_view_of_a_product() -> None:
    assert view(Record("x", 1)) == Struct(
        name="Record",
        properties=List(
            head=Field(name="foo", value="x"),
            tail=List(head=Field(name="bar", value=1), tail=Empty()),
        ),
    )


def test_view_of_a_sum_labels_the_selected_case() -> None:
    assert view(Sample.b) == Sum(
        name="Sample", cases=Second(First(Field(name="b", value=Empty())))
    )
    assert view(Sample.a(x=2)) == Sum(
        name="Sample",
        cases=First(
            Field(name="a", value=List(head=Field(name="x", value=2), tail=Empty()))
        ),
    )


def test_view_recurses_into_nested_values() -> None:
    tree = view(Person("Ada", Address("Main", "London")))

    assert isinstance(tree, Struct)
    address = tree.properties.tail.head
    assert address == Field(
        name="address",
        value=Struct(
            name="Address",
            properties=List(
                head=Field(name="street", value="Main"),
                tail=List(head=Field(name="city", value="London"), tail=Empty()),
            ),
        ),
    )


def test_view_leaves_plain_values_alone() -> None:
    assert view(3) == 3
    assert view("text") == "text"


@pytest.mark.parametrize(
    "value",
    [
        Record("x", 1),
        Unit(),
        Person("Ada", Address("Main", "London"), "A"),
        Sample.a(x=1),
        Sample.b,
        Token.pair(1, label="x"),
        Drawing("d", Shape.rect(width=1.0, height=2.0)),
        Tree.node(left=Tree.leaf(1), right=Tree.node(left=Tree.leaf(2), right=Tree.leaf(3))),
    ],
)
def test_rebuild_inverts_view(value: object) -> None:
    assert rebuild(type(value), view(value)) == value


def test_rebuild_rejects_foreign_views() -> None:
    with pytest.raises(TypeError, match="not a view of Record"):
        rebuild(Record, view(Book("T", 3)))


def test_equal_compares_structure() -> None:
    assert equal(Record("x", 1), Record("x", 1))
    assert not equal(Record("x", 1), Record("x", 2))
    assert not equal(Sample.a(x=1), Sample.b)
    assert equal(Person("Ada", Address("a", "b")), Person("Ada", Address("a", "b")))
    assert not equal(Person("Ada", Address("a", "b")), Person("Ada", Address("a", "c")))
    assert equal(3, 3)
    assert not equal(Unit(), 3)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Book("T", 3), "Book(title='T', pages=3)"),
        (Unit(), "Unit()"),
        (Shape.circle(radius=1.0), "Shape.circle(radius=1.0)"),
        (Shape.point, "Shape.point"),
        (Token.number(3), "Token.number(3)"),
        (Token.pair(1, label="x"), "Token.pair(1, label='x')"),
        (Drawing("d", Shape.point), "Drawing(title='d', shape=Shape.point)"),
        (
            Person("Ada", Address("Main", "London")),
            "Person(name='Ada', address=Address(street='Main', city='London'), "
            "nickname=None)",
        ),
    ],
)
def test_show(value: object, expected: str) -> None:
    assert show(value) == expected


def test_leaves_of_nested_products() -> None:
    person = Person("Ada", Address("Main", "London"))

    assert list(leaves(person)) == [
        (("name",), "Ada"),
        (("address", "street"), "Main"),
        (("address", "city"), "London"),
        (("nickname",), None),
    ]


def test_leaves_of_sums_use_case_names_and_positions() -> None:
    assert list(leaves(Token.pair(1, label="x"))) == [
        (("pair", 0), 1),
        (("pair", "label"), "x"),
    ]
    assert list(leaves(Shape.point)) == []
    assert list(leaves(Tree.node(left=Tree.leaf(1), right=Tree.leaf(2)))) == [
        (("node", "left", "leaf", 0), 1),
        (("node", "right", "leaf", 0), 2),
    ]


def test_edit_products() -> None:
    person = Person("Ada", Address("Main", "London"))

    assert edit(person, _upper) == Person("ADA", Address("MAIN", "LONDON"))


def test_edit_sums() -> None:
    assert edit(Shape.circle(radius=1.0), lambda path, leaf: leaf * 2) == (
        Shape.circle(radius=2.0)
    )
    assert edit(Shape.point, _upper) is Shape.point


def test_edit_recursive_sums() -> None:
    tree = Tree.node(left=Tree.leaf(1), right=Tree.leaf(2))

    edited = edit(tree, lambda path, leaf: leaf + 1)

    assert edited == Tree.node(left=Tree.leaf(2), right=Tree.leaf(3))


def test_edit_rebuilds_values_under_type_parameters() -> None:
    box = Box(Book("title", 3))

    assert rebuild(Box, view(box)) == box
    assert edit(box, lambda path, leaf: leaf) == box
    assert edit(box, _upper) == Box(Book("TITLE", 3))


def test_edit_sees_paths() -> None:
    seen: list[tuple[str | int, ...]] = []

    def record(path: tuple[str | int, ...], leaf: object) -> object:
        seen.append(path)
        return leaf

    edit(Drawing("d", Shape.rect(width=1.0, height=2.0)), record)

    assert seen == [
        ("title",),
        ("shape", "rect", "width"),
        ("shape", "rect", "height"),
    ]
