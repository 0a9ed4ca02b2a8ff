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

"""Property-based tests for the isomorphism laws."""

from __future__ import annotations

from hypothesis import given, settings, strategies as st

from structural.contracts import verification_enabled
from structural.generic import edit, equal, rebuild, show, view
from tests._fixtures import (
    Address,
    Drawing,
    Person,
    Record,
    Sample,
    Shape,
    Token,
    Tree,
)

finite_floats = st.floats(allow_nan=False, allow_infinity=False)

records = st.builds(Record, st.text(), st.integers())
people = st.builds(
    Person,
    st.text(),
    st.builds(Address, st.text(), st.text()),
    st.none() | st.text(),
)
samples = st.one_of(st.builds(Sample.a, x=st.integers()), st.just(Sample.b))
tokens = st.one_of(
    st.builds(Token.number, st.integers()),
    st.builds(Token.pair, st.integers(), label=st.text()),
    st.builds(Token.word, text=st.text()),
    st.just(Token.end),
)
shapes = st.one_of(
    st.builds(Shape.circle, radius=finite_floats),
    st.builds(Shape.rect, width=finite_floats, height=finite_floats),
    st.just(Shape.point),
)
drawings = st.builds(Drawing, st.text(), shapes)
trees = st.recursive(
    st.builds(Tree.leaf, st.integers()),
    lambda children: st.builds(Tree.node, left=children, right=children),
    max_leaves=10,
)
values = st.one_of(records, people, samples, tokens, drawings, trees)


@given(values)
@settings(max_examples=200)
def test_from_inverts_to(value: object) -> None:
    cls = type(value)

    assert cls.from_(value.to()) == value  # type: ignore[attr-defined]


@given(values)
@settings(max_examples=200)
def test_to_inverts_from(value: object) -> None:
    canonical = value.to()  # type: ignore[attr-defined]

    assert type(value).from_(canonical).to() == canonical  # type: ignore[attr-defined]


@given(values)
@settings(max_examples=100)
def test_verified_conversions_accept_lawful_values(value: object) -> None:
    with verification_enabled():
        restored = type(value).from_(value.to())  # type: ignore[attr-defined]

    assert restored == value


@given(values)
@settings(max_examples=100)
def test_rebuild_inverts_view(value: object) -> None:
    assert rebuild(type(value), view(value)) == value


@given(values)
@settings(max_examples=100)
def test_identity_edit_preserves_values(value: object) -> None:
    assert edit(value, lambda path, leaf: leaf) == value
    assert equal(value, value)


@given(st.text(), st.integers())
def test_record_scenario(foo: str, bar: int) -> None:
    value = Record.from_((foo, (bar, ())))

    assert value.foo == foo
    assert value.bar == bar
    assert value.to() == (foo, (bar, ()))
    assert show(value) == f"Record(foo={foo!r}, bar={bar!r})"
