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

"""Member extraction from class declaration syntax.

The extractor reads an ``ast.ClassDef`` and produces an ordered
:class:`Declaration`. It never executes or imports anything, so the same
declaration always extracts to the same result.

Products are plain classes whose stored members are annotated names::

    @structural
    class Book:
        title: str
        pages: int = 0

Sums subclass :class:`structural.Variant` and declare one case per
assignment; positional ``case`` arguments are unlabelled parameters and
keyword arguments are labelled ones::

    @structural
    class Shape(Variant):
        circle = case(radius=float)
        polygon = case(int, closed=bool)
        point = case()
"""

from __future__ import annotations

import ast
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from .canonical import CANONICAL_NAMESPACE
from .errors import (
    MissingTypeAnnotationError,
    UnsupportedDeclarationKindError,
    UnsupportedMemberShapeError,
    UnsupportedPatternError,
)

__all__ = [
    "Declaration",
    "DeclarationKind",
    "EnumCase",
    "Parameter",
    "StoredField",
    "extract_declaration",
    "is_structural_decorator",
    "structural_classes",
]

_SUM_BASE: Final[str] = "Variant"
_TRANSPARENT_BASES: Final[frozenset[str]] = frozenset({"object", "Generic"})
_REJECTED_BASES: Final[frozenset[str]] = frozenset(
    {
        "Enum",
        "Flag",
        "IntEnum",
        "IntFlag",
        "NamedTuple",
        "Protocol",
        "StrEnum",
        "TypedDict",
    }
)
_COMPUTED_FACTORIES: Final[frozenset[str]] = frozenset({"property", "cached_property"})
_GENERATED_MEMBERS: Final[frozenset[str]] = frozenset(
    {"Structure", "structure", "to", "from_"}
)
_POSITIONAL_FIELD: Final[re.Pattern[str]] = re.compile(r"_\d+")


class DeclarationKind(Enum):
    PRODUCT = "product"
    SUM = "sum"


@dataclass(slots=True, frozen=True)
class StoredField:
    """A stored product member and the source text of its type."""

    name: str
    annotation: str
    lineno: int | None = field(default=None, compare=False)


@dataclass(slots=True, frozen=True)
class Parameter:
    """A sum case parameter; ``label`` is ``None`` for positional parameters."""

    label: str | None
    annotation: str


@dataclass(slots=True, frozen=True)
class EnumCase:
    name: str
    parameters: tuple[Parameter, ...] = ()
    lineno: int | None = field(default=None, compare=False)


@dataclass(slots=True, frozen=True)
class Declaration:
    """Ordered members of a product or sum declaration.

    Attributes:
        name: The declaring class name.
        kind: Whether the class derives as a product or as a sum.
        fields: Stored fields in declaration order (products only).
        cases: Cases in declaration order (sums only).
        skipped: Members ignored because they have no stored backing.
    """

    name: str
    kind: DeclarationKind
    fields: tuple[StoredField, ...] = ()
    cases: tuple[EnumCase, ...] = ()
    skipped: tuple[str, ...] = field(default=(), compare=False)


def extract_declaration(node: ast.AST) -> Declaration:
    """Return the ordered members declared by ``node``.

    Raises:
        UnsupportedDeclarationKindError: ``node`` is not a product or sum
            class, or its name shadows a canonical container.
        UnsupportedMemberShapeError: A member binds several names at once, or
            its name collides with a generated member.
        UnsupportedPatternError: A stored member's target is not a name.
        MissingTypeAnnotationError: A product member has no annotation.
    """

    if not isinstance(node, ast.ClassDef):
        raise UnsupportedDeclarationKindError(
            f"Only classes can be derived, not {type(node).__name__} nodes.",
            lineno=getattr(node, "lineno", None),
        )
    if node.name in CANONICAL_NAMESPACE:
        raise UnsupportedDeclarationKindError(
            f"{node.name} shadows a canonical container name.",
            declaration=node.name,
            lineno=node.lineno,
        )
    match _declaration_kind(node):
        case DeclarationKind.PRODUCT:
            fields, skipped = _extract_fields(node)
            return Declaration(
                name=node.name,
                kind=DeclarationKind.PRODUCT,
                fields=fields,
                skipped=skipped,
            )
        case DeclarationKind.SUM:
            cases, skipped = _extract_cases(node)
            return Declaration(
                name=node.name,
                kind=DeclarationKind.SUM,
                cases=cases,
                skipped=skipped,
            )


def structural_classes(tree: ast.Module) -> Iterator[ast.ClassDef]:
    """Yield the top-level classes of ``tree`` decorated with ``structural``."""

    for statement in tree.body:
        if isinstance(statement, ast.ClassDef) and any(
            is_structural_decorator(decorator)
            for decorator in statement.decorator_list
        ):
            yield statement


def is_structural_decorator(node: ast.expr) -> bool:
    if isinstance(node, ast.Call):
        node = node.func
    return _terminal_name(node) == "structural"


def _declaration_kind(node: ast.ClassDef) -> DeclarationKind:
    base_names = [_terminal_name(base) for base in node.bases]
    if _SUM_BASE in base_names:
        return DeclarationKind.SUM
    for base, name in zip(node.bases, base_names, strict=True):
        if name in _TRANSPARENT_BASES:
            continue
        if name in _REJECTED_BASES:
            message = f"{name} subclasses are neither products nor sums."
        else:
            message = (
                f"Products cannot inherit from {ast.unparse(base)}; "
                "inherited fields would not be part of the structure."
            )
        raise UnsupportedDeclarationKindError(
            message, declaration=node.name, lineno=node.lineno
        )
    return DeclarationKind.PRODUCT


def _extract_fields(
    node: ast.ClassDef,
) -> tuple[tuple[StoredField, ...], tuple[str, ...]]:
    fields: list[StoredField] = []
    skipped: list[str] = []
    for statement in node.body:
        match statement:
            case ast.Assign(targets=targets, value=value):
                skipped.extend(_check_unannotated(node.name, statement, targets, value))
            case ast.AnnAssign(target=target, annotation=annotation, value=value):
                stored = _stored_field(node.name, statement, target, annotation, value)
                if stored is None:
                    skipped.append(_target_name(target))
                else:
                    fields.append(stored)
            case ast.FunctionDef(name=name) | ast.AsyncFunctionDef(name=name):
                skipped.append(name)
            case _:
                pass
    return tuple(fields), tuple(skipped)


def _check_unannotated(
    declaration: str,
    statement: ast.Assign,
    targets: Sequence[ast.expr],
    value: ast.expr,
) -> list[str]:
    """Validate a plain assignment; return the names it skips."""

    if len(targets) > 1:
        raise UnsupportedMemberShapeError(
            "Multiple bindings are not supported; declare one member per statement.",
            declaration=declaration,
            member=_target_name(targets[0]),
            lineno=statement.lineno,
        )
    target = targets[0]
    if _is_computed(value):
        return [_target_name(target)]
    if not isinstance(target, ast.Name):
        raise UnsupportedPatternError(
            f"Only identifier targets are supported, not {ast.unparse(target)!r}.",
            declaration=declaration,
            lineno=statement.lineno,
        )
    if _is_dunder(target.id):
        return [target.id]
    raise MissingTypeAnnotationError(
        "Only members with explicit types are supported.",
        declaration=declaration,
        member=target.id,
        lineno=statement.lineno,
    )


def _stored_field(
    declaration: str,
    statement: ast.AnnAssign,
    target: ast.expr,
    annotation: ast.expr,
    value: ast.expr | None,
) -> StoredField | None:
    if value is not None and _is_computed(value):
        return None
    if not isinstance(target, ast.Name) or not statement.simple:
        raise UnsupportedPatternError(
            f"Only identifier targets are supported, not {ast.unparse(target)!r}.",
            declaration=declaration,
            lineno=statement.lineno,
        )
    if _is_dunder(target.id) or _annotation_origin(annotation) == "ClassVar":
        return None
    if _annotation_origin(annotation) == "KW_ONLY":
        raise UnsupportedMemberShapeError(
            "KW_ONLY markers make later fields keyword-only; "
            "the memberwise constructor passes fields by position.",
            declaration=declaration,
            member=target.id,
            lineno=statement.lineno,
        )
    if _is_private(target.id):
        raise UnsupportedPatternError(
            "Private names are mangled inside the class body; "
            "use a single leading underscore.",
            declaration=declaration,
            member=target.id,
            lineno=statement.lineno,
        )
    if _annotation_origin(annotation) == "InitVar":
        raise UnsupportedMemberShapeError(
            "InitVar pseudo-fields have no stored backing.",
            declaration=declaration,
            member=target.id,
            lineno=statement.lineno,
        )
    _check_generated(declaration, target.id, statement.lineno)
    return StoredField(
        name=target.id,
        annotation=ast.unparse(annotation),
        lineno=statement.lineno,
    )


def _extract_cases(
    node: ast.ClassDef,
) -> tuple[tuple[EnumCase, ...], tuple[str, ...]]:
    cases: list[EnumCase] = []
    skipped: list[str] = []
    for statement in node.body:
        match statement:
            case ast.Assign(targets=targets, value=value) if _declares_case(value):
                cases.append(_enum_case(node.name, statement, targets, value))
            case ast.Assign(targets=targets):
                skipped.extend(_target_name(target) for target in targets)
            case ast.AnnAssign(target=target):
                skipped.append(_target_name(target))
            case ast.FunctionDef(name=name) | ast.AsyncFunctionDef(name=name):
                skipped.append(name)
            case _:
                pass
    return tuple(cases), tuple(skipped)


def _enum_case(
    declaration: str,
    statement: ast.Assign,
    targets: Sequence[ast.expr],
    value: ast.expr,
) -> EnumCase:
    target = targets[0]
    if (
        len(targets) > 1
        or not isinstance(target, ast.Name)
        or not isinstance(value, ast.Call)
    ):
        raise UnsupportedMemberShapeError(
            "Multiple cases are not supported; declare one case per statement.",
            declaration=declaration,
            member=_target_name(target),
            lineno=statement.lineno,
        )
    _check_generated(declaration, target.id, statement.lineno)
    return EnumCase(
        name=target.id,
        parameters=_case_parameters(declaration, target.id, statement, value),
        lineno=statement.lineno,
    )


def _case_parameters(
    declaration: str, name: str, statement: ast.Assign, call: ast.Call
) -> tuple[Parameter, ...]:
    unpacked = any(isinstance(arg, ast.Starred) for arg in call.args) or any(
        keyword.arg is None for keyword in call.keywords
    )
    if unpacked:
        raise UnsupportedMemberShapeError(
            "Case parameters must be listed explicitly, not unpacked.",
            declaration=declaration,
            member=name,
            lineno=statement.lineno,
        )
    for keyword in call.keywords:
        if keyword.arg is not None and _POSITIONAL_FIELD.fullmatch(keyword.arg):
            raise UnsupportedMemberShapeError(
                f"Label {keyword.arg!r} is reserved for unlabelled parameters.",
                declaration=declaration,
                member=name,
                lineno=statement.lineno,
            )
    positional = [Parameter(None, ast.unparse(arg)) for arg in call.args]
    labelled = [
        Parameter(keyword.arg, ast.unparse(keyword.value)) for keyword in call.keywords
    ]
    return (*positional, *labelled)


def _check_generated(declaration: str, name: str, lineno: int) -> None:
    if name in _GENERATED_MEMBERS:
        raise UnsupportedMemberShapeError(
            f"{name!r} is reserved for the generated members.",
            declaration=declaration,
            member=name,
            lineno=lineno,
        )


def _declares_case(node: ast.expr) -> bool:
    if isinstance(node, ast.Tuple | ast.List):
        return any(_is_case_call(element) for element in node.elts)
    return _is_case_call(node)


def _is_case_call(node: ast.expr) -> bool:
    return isinstance(node, ast.Call) and _terminal_name(node.func) == "case"


def _is_computed(node: ast.expr) -> bool:
    return (
        isinstance(node, ast.Call)
        and _terminal_name(node.func) in _COMPUTED_FACTORIES
    )


def _annotation_origin(annotation: ast.expr) -> str | None:
    if isinstance(annotation, ast.Subscript):
        annotation = annotation.value
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        return annotation.value.split("[", 1)[0].rsplit(".", 1)[-1].strip()
    return _terminal_name(annotation)


def _terminal_name(node: ast.expr) -> str | None:
    match node:
        case ast.Name(id=name):
            return name
        case ast.Attribute(attr=name):
            return name
        case ast.Subscript(value=value):
            return _terminal_name(value)
        case _:
            return None


def _target_name(node: ast.expr) -> str:
    return node.id if isinstance(node, ast.Name) else ast.unparse(node)


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _is_private(name: str) -> bool:
    return name.startswith("__") and not name.endswith("__")
