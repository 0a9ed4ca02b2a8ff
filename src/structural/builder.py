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

"""Canonical type expressions folded from declared members.

The fold is written once against :class:`TypeAlgebra` and interpreted twice:
:class:`SyntaxAlgebra` produces the expression rendered in expansions and
:class:`AliasAlgebra` produces the live ``typing`` alias attached to the class
as ``Structure``. Both interpret the same right-to-left fold, so the rendered
and the attached expression cannot drift apart.

Products fold with seed ``Empty``, one ``List[Field[T], ...]`` layer per
stored field. Sums fold with seed ``Nothing``, one ``Choice[payload, ...]``
layer per case, where ``payload`` folds the case's parameters with seed
``Empty`` (unlabelled parameters stay bare, labelled ones are wrapped in
``Field``).
"""

from __future__ import annotations

import ast
from collections.abc import Callable, Mapping, Sequence
from typing import Protocol, get_type_hints, override

from . import _syntax as syntax
from .canonical import Choice, Empty, Field, List, Nothing, Struct, Sum
from .errors import UnresolvedAnnotationError
from .extract import Declaration, DeclarationKind, EnumCase, Parameter, StoredField

__all__ = [
    "AliasAlgebra",
    "SyntaxAlgebra",
    "TypeAlgebra",
    "annotation_resolver",
    "build_structure",
    "field_types",
    "structure_alias",
    "structure_type",
]


class TypeAlgebra[T](Protocol):
    """One constructor per canonical container shape."""

    def empty(self) -> T: ...

    def nothing(self) -> T: ...

    def leaf(self, annotation: str) -> T: ...

    def field(self, value: T) -> T: ...

    def pair(self, head: T, tail: T) -> T: ...

    def choice(self, left: T, right: T) -> T: ...

    def struct(self, properties: T) -> T: ...

    def sum(self, cases: T) -> T: ...


class SyntaxAlgebra(TypeAlgebra[ast.expr]):
    """Builds the canonical type as an unevaluated expression."""

    @override
    def empty(self) -> ast.expr:
        return syntax.name("Empty")

    @override
    def nothing(self) -> ast.expr:
        return syntax.name("Nothing")

    @override
    def leaf(self, annotation: str) -> ast.expr:
        return syntax.parse_expression(annotation)

    @override
    def field(self, value: ast.expr) -> ast.expr:
        return syntax.subscript("Field", value)

    @override
    def pair(self, head: ast.expr, tail: ast.expr) -> ast.expr:
        return syntax.subscript("List", head, tail)

    @override
    def choice(self, left: ast.expr, right: ast.expr) -> ast.expr:
        return syntax.subscript("Choice", left, right)

    @override
    def struct(self, properties: ast.expr) -> ast.expr:
        return syntax.subscript("Struct", properties)

    @override
    def sum(self, cases: ast.expr) -> ast.expr:
        return syntax.subscript("Sum", cases)


class AliasAlgebra(TypeAlgebra[object]):
    """Builds the canonical type as a live generic alias.

    Leaf annotations are looked up through ``resolve``; every other layer is a
    subscription of the canonical containers themselves, so user names can
    never shadow them.
    """

    def __init__(self, resolve: Callable[[str], object]) -> None:
        super().__init__()
        self._resolve = resolve

    @override
    def empty(self) -> object:
        return Empty

    @override
    def nothing(self) -> object:
        return Nothing

    @override
    def leaf(self, annotation: str) -> object:
        return self._resolve(annotation)

    @override
    def field(self, value: object) -> object:
        return Field[value]  # type: ignore[valid-type]

    @override
    def pair(self, head: object, tail: object) -> object:
        return List[head, tail]  # type: ignore[valid-type]

    @override
    def choice(self, left: object, right: object) -> object:
        return Choice[left, right]  # type: ignore[valid-type]

    @override
    def struct(self, properties: object) -> object:
        return Struct[properties]  # type: ignore[valid-type]

    @override
    def sum(self, cases: object) -> object:
        return Sum[cases]  # type: ignore[valid-type]


def build_structure[T](declaration: Declaration, algebra: TypeAlgebra[T]) -> T:
    """Fold ``declaration`` into its canonical type using ``algebra``."""

    match declaration.kind:
        case DeclarationKind.PRODUCT:
            return algebra.struct(_product(declaration.fields, algebra))
        case DeclarationKind.SUM:
            return algebra.sum(_cases(declaration.cases, algebra))


def structure_type(declaration: Declaration) -> ast.expr:
    """Return the canonical type of ``declaration`` as syntax."""

    return build_structure(declaration, SyntaxAlgebra())


def structure_alias(
    declaration: Declaration, resolve: Callable[[str], object]
) -> object:
    """Return the canonical type of ``declaration`` as a generic alias."""

    return build_structure(declaration, AliasAlgebra(resolve))


def field_types(cls: type, *, scope: type | None = None) -> dict[str, object]:
    """Return the resolved annotations of ``cls``.

    The type parameters of ``scope`` (``cls`` by default) and ``scope`` itself
    are passed as ``localns`` so that ``get_type_hints`` resolves PEP 695
    parameters and self references. Sum cases pass their sum as ``scope``.

    Raises:
        UnresolvedAnnotationError: An annotation names an undefined type.
    """

    owner = cls if scope is None else scope
    localns: dict[str, object] = {
        parameter.__name__: parameter
        for parameter in getattr(owner, "__type_params__", ())
    }
    localns.setdefault(owner.__name__, owner)
    try:
        return get_type_hints(cls, localns=localns, include_extras=True)
    except NameError as error:
        raise UnresolvedAnnotationError(
            f"Cannot resolve the annotations of {cls.__qualname__}: {error}. "
            "Define referenced types before the class is derived.",
            declaration=owner.__name__,
        ) from error


def annotation_resolver(
    declaration: str, resolved: Mapping[str, object]
) -> Callable[[str], object]:
    """Return a resolver looking annotation sources up in ``resolved``.

    String values end up as ``ForwardRef`` arguments of the alias.
    """

    def resolve(annotation: str) -> object:
        try:
            return resolved[annotation]
        except KeyError:
            raise UnresolvedAnnotationError(
                f"No resolved type for annotation {annotation!r}.",
                declaration=declaration,
            ) from None

    return resolve


def _product[T](fields: Sequence[StoredField], algebra: TypeAlgebra[T]) -> T:
    return syntax.fold_right(
        fields,
        algebra.empty(),
        lambda stored, rest: algebra.pair(
            algebra.field(algebra.leaf(stored.annotation)), rest
        ),
    )


def _payload[T](parameters: Sequence[Parameter], algebra: TypeAlgebra[T]) -> T:
    def layer(parameter: Parameter, rest: T) -> T:
        head = algebra.leaf(parameter.annotation)
        if parameter.label is not None:
            head = algebra.field(head)
        return algebra.pair(head, rest)

    return syntax.fold_right(parameters, algebra.empty(), layer)


def _cases[T](cases: Sequence[EnumCase], algebra: TypeAlgebra[T]) -> T:
    return syntax.fold_right(
        cases,
        algebra.nothing(),
        lambda case, rest: algebra.choice(_payload(case.parameters, algebra), rest),
    )
