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

"""Generic algorithms written once against the canonical representation.

Every algorithm works on the *labelled view* of a value: the canonical value
returned by ``to()`` zipped with the name metadata of ``structure``. Products
view as::

    Struct(name='Book', properties=List(head=Field(name='title', value='T'), tail=...))

and sums as a choice chain whose selected case is labelled with its name::

    Sum(name='Shape', cases=First(Field(name='circle', value=List(...))))

Derived values nested inside other derived values are viewed recursively, so
a newly derived type works with every algorithm here without extra code.
"""

from __future__ import annotations

import dataclasses
import sys
import types
from collections.abc import Callable, Iterator, Sequence
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin

from .builder import field_types
from .canonical import Empty, Field, First, List, Second, Struct, Sum
from .extract import Declaration, EnumCase

__all__ = [
    "Path",
    "edit",
    "equal",
    "is_structural",
    "leaves",
    "rebuild",
    "show",
    "view",
]

type Path = tuple[str | int, ...]
"""Field names, case names and positional indices leading to a leaf."""


def is_structural(value: object) -> bool:
    """Return ``True`` for derived classes and their instances."""

    owner = value if isinstance(value, type) else type(value)
    return isinstance(getattr(owner, "__structural__", None), Declaration)


def view(value: object) -> object:
    """Return the labelled canonical tree of ``value``.

    Values that are not derived are returned unchanged.
    """

    if not is_structural(value):
        return value
    owner = _derived_class(type(value))
    canonical: Any = value.to()  # type: ignore[attr-defined]
    match owner.structure:  # type: ignore[attr-defined]
        case Struct(name=name, properties=labels):
            return Struct(name=name, properties=_label_fields(labels, canonical))
        case Sum(name=name, cases=labels):
            return Sum(name=name, cases=_label_choice(labels, canonical.cases))
        case _ as unexpected:
            raise TypeError(f"Unexpected structure metadata: {unexpected!r}")


def rebuild[T](cls: type[T], tree: object) -> T:
    """Rebuild a value of ``cls`` from its labelled view.

    Nested views are rebuilt with the derived classes their field
    annotations name. Views under annotations that name no derived class
    (type parameters, ``Any``, ``object``) are looked up by name in the
    module of ``cls``.

    Raises:
        TypeError: ``tree`` is not a view of ``cls``.
    """

    owner = _derived_class(cls)
    declaration: Declaration = owner.__structural__  # type: ignore[attr-defined]
    match tree:
        case Struct(name=name, properties=properties) if name == declaration.name:
            hints = field_types(owner)
            annotations = tuple(hints[stored.name] for stored in declaration.fields)
            return owner.from_(_rebuild_fields(owner, properties, annotations))  # type: ignore[attr-defined]
        case Sum(name=name, cases=cases) if name == declaration.name:
            return owner.from_(  # type: ignore[attr-defined]
                Sum(name=name, cases=_rebuild_choice(owner, cases, declaration.cases))
            )
        case _:
            raise TypeError(f"{tree!r} is not a view of {declaration.name}.")


def equal(left: object, right: object) -> bool:
    """Compare two values by structure, recursing into nested derived values."""

    return _equal(view(left), view(right))


def show(value: object) -> str:
    """Render ``value`` from its structure.

    Products render as ``Book(title='T', pages=3)``, sum cases as
    ``Shape.circle(radius=1.0)``, ``Token.number(3)`` or ``Shape.point``.
    """

    return _show(view(value))


def leaves(value: object) -> Iterator[tuple[Path, object]]:
    """Yield ``(path, leaf)`` for every primitive leaf of ``value``."""

    yield from _leaves(view(value), ())


def edit[T](value: T, editor: Callable[[Path, object], object]) -> T:
    """Return a copy of ``value`` with each leaf replaced by ``editor(path, leaf)``."""

    if not is_structural(value):
        return editor((), value)  # type: ignore[return-value]
    edited = _edit(view(value), (), editor)
    return rebuild(_derived_class(type(value)), edited)  # type: ignore[return-value]


def _derived_class(cls: type) -> type:
    for candidate in cls.__mro__:
        if "__structural__" in candidate.__dict__:
            return candidate
    raise TypeError(f"{cls.__qualname__} is not a derived class.")


def _label_fields(labels: object, chain: Any) -> object:
    match labels:
        case Empty():
            return Empty()
        case List(head=Field(name=label), tail=rest):
            value, tail = chain
            return List(
                head=Field(name=label, value=view(value)),
                tail=_label_fields(rest, tail),
            )
        case _ as unexpected:
            raise TypeError(f"Unexpected field metadata: {unexpected!r}")


def _label_choice(labels: Any, choice: object) -> object:
    match choice:
        case First(value=payload):
            return First(Field(name=labels.head.name, value=_view_payload(payload)))
        case Second(value=rest):
            return Second(_label_choice(labels.tail, rest))
        case _ as unexpected:
            raise TypeError(f"Unexpected choice: {unexpected!r}")


def _view_payload(payload: object) -> object:
    match payload:
        case Empty():
            return Empty()
        case List(head=Field(name=label, value=value), tail=tail):
            return List(
                head=Field(name=label, value=view(value)), tail=_view_payload(tail)
            )
        case List(head=head, tail=tail):
            return List(head=view(head), tail=_view_payload(tail))
        case _ as unexpected:
            raise TypeError(f"Unexpected payload: {unexpected!r}")


def _rebuild_fields(
    owner: type, properties: object, annotations: Sequence[object]
) -> tuple[object, ...]:
    match properties:
        case Empty():
            return ()
        case List(head=Field(value=value), tail=tail) if annotations:
            return (
                _rebuild_leaf(owner, value, annotations[0]),
                _rebuild_fields(owner, tail, annotations[1:]),
            )
        case _:
            raise TypeError(f"Unexpected properties: {properties!r}")


def _rebuild_choice(
    owner: type, choice: object, cases: Sequence[EnumCase]
) -> object:
    match choice:
        case First(value=Field(value=payload)) if cases:
            parameters = _case_parameters(owner, cases[0])
            return First(_rebuild_payload(owner, payload, parameters))
        case Second(value=tail) if cases:
            return Second(_rebuild_choice(owner, tail, cases[1:]))
        case _:
            raise TypeError(f"Unexpected choice: {choice!r}")


def _case_parameters(
    owner: type, enum_case: EnumCase
) -> tuple[tuple[str | None, object], ...]:
    """Pair each case parameter's label with its resolved type."""

    member = getattr(owner, enum_case.name)
    case_class = member if isinstance(member, type) else type(member)
    hints = field_types(case_class, scope=owner)
    specs = dataclasses.fields(case_class)
    return tuple(
        (parameter.label, hints[spec.name])
        for parameter, spec in zip(enum_case.parameters, specs, strict=True)
    )


def _rebuild_payload(
    owner: type,
    payload: object,
    parameters: Sequence[tuple[str | None, object]],
) -> object:
    match payload:
        case Empty():
            return Empty()
        case List(head=head, tail=tail) if parameters:
            (label, annotation), rest = parameters[0], parameters[1:]
            if label is None:
                rebuilt = _rebuild_leaf(owner, head, annotation)
            else:
                rebuilt = Field(
                    name=head.name, value=_rebuild_leaf(owner, head.value, annotation)
                )
            return List(head=rebuilt, tail=_rebuild_payload(owner, tail, rest))
        case _:
            raise TypeError(f"Unexpected payload: {payload!r}")


def _rebuild_leaf(owner: type, value: object, annotation: object) -> object:
    match value:
        case Struct(name=name) | Sum(name=name):
            return rebuild(_view_class(owner, name, annotation), value)
        case _:
            return value


def _view_class(owner: type, name: str, annotation: object) -> type:
    for candidate in _candidates(annotation):
        if is_structural(candidate) and candidate.__name__ == name:
            return candidate
    module = sys.modules.get(owner.__module__)
    candidate = getattr(module, name, None)
    if isinstance(candidate, type) and is_structural(candidate):
        return candidate
    raise TypeError(
        f"No derived type named {name!r} in {annotation!r} or {owner.__module__}."
    )


def _candidates(annotation: object) -> Iterator[type]:
    match annotation:
        case TypeVar():
            if annotation.__bound__ is not None:
                yield from _candidates(annotation.__bound__)
            for constraint in annotation.__constraints__:
                yield from _candidates(constraint)
        case type():
            yield annotation
        case _ if get_origin(annotation) in (Union, types.UnionType):
            for argument in get_args(annotation):
                yield from _candidates(argument)
        case _ if get_origin(annotation) is Annotated:
            yield from _candidates(get_args(annotation)[0])
        case _ if isinstance(get_origin(annotation), type):
            yield from _candidates(get_origin(annotation))
        case _:
            return


def _equal(left: object, right: object) -> bool:
    match left, right:
        case Struct(name=a, properties=p), Struct(name=b, properties=q):
            return a == b and _equal(p, q)
        case Sum(name=a, cases=p), Sum(name=b, cases=q):
            return a == b and _equal(p, q)
        case List(head=h1, tail=t1), List(head=h2, tail=t2):
            return _equal(h1, h2) and _equal(t1, t2)
        case Empty(), Empty():
            return True
        case Field(name=a, value=v), Field(name=b, value=w):
            return a == b and _equal(v, w)
        case First(value=v), First(value=w):
            return _equal(v, w)
        case Second(value=v), Second(value=w):
            return _equal(v, w)
        case _:
            return not _is_container(left) and not _is_container(right) and left == right


def _is_container(value: object) -> bool:
    return isinstance(value, Struct | Sum | List | Empty | Field | First | Second)


def _show(tree: object) -> str:
    match tree:
        case Struct(name=name, properties=properties):
            return f"{name}({', '.join(_show_members(properties))})"
        case Sum(name=name, cases=cases):
            return f"{name}.{_show(cases)}"
        case First(value=Field(name=label, value=Empty())):
            return str(label)
        case First(value=Field(name=label, value=payload)):
            return f"{label}({', '.join(_show_members(payload))})"
        case Second(value=rest):
            return _show(rest)
        case _:
            return repr(tree)


def _show_members(chain: object) -> Iterator[str]:
    match chain:
        case List(head=Field(name=label, value=value), tail=tail):
            yield f"{label}={_show(value)}"
            yield from _show_members(tail)
        case List(head=head, tail=tail):
            yield _show(head)
            yield from _show_members(tail)
        case _:
            return


def _leaves(tree: object, path: Path) -> Iterator[tuple[Path, object]]:
    match tree:
        case Struct(properties=properties):
            yield from _chain_leaves(properties, path, 0)
        case Sum(cases=cases):
            yield from _leaves(cases, path)
        case First(value=Field(name=label, value=payload)):
            yield from _chain_leaves(payload, (*path, label), 0)
        case Second(value=rest):
            yield from _leaves(rest, path)
        case _:
            yield path, tree


def _chain_leaves(
    chain: object, path: Path, position: int
) -> Iterator[tuple[Path, object]]:
    match chain:
        case List(head=Field(name=label, value=value), tail=tail):
            yield from _leaves(value, (*path, label))
            yield from _chain_leaves(tail, path, position + 1)
        case List(head=head, tail=tail):
            yield from _leaves(head, (*path, position))
            yield from _chain_leaves(tail, path, position + 1)
        case _:
            return


def _edit(
    tree: object, path: Path, editor: Callable[[Path, object], object]
) -> object:
    match tree:
        case Struct(name=name, properties=properties):
            return Struct(name=name, properties=_edit_chain(properties, path, editor, 0))
        case Sum(name=name, cases=cases):
            return Sum(name=name, cases=_edit(cases, path, editor))
        case First(value=Field(name=label, value=payload)):
            return First(
                Field(name=label, value=_edit_chain(payload, (*path, label), editor, 0))
            )
        case Second(value=rest):
            return Second(_edit(rest, path, editor))
        case _:
            return editor(path, tree)


def _edit_chain(
    chain: object,
    path: Path,
    editor: Callable[[Path, object], object],
    position: int,
) -> object:
    match chain:
        case List(head=Field(name=label, value=value), tail=tail):
            return List(
                head=Field(name=label, value=_edit(value, (*path, label), editor)),
                tail=_edit_chain(tail, path, editor, position + 1),
            )
        case List(head=head, tail=tail):
            return List(
                head=_edit(head, (*path, position), editor),
                tail=_edit_chain(tail, path, editor, position + 1),
            )
        case _:
            return chain
