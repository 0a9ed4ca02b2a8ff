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

"""The ``@structural`` decorator and the runtime support for sum types.

Decorating a class derives it once, at class-definition time::

    @structural
    class Book:
        title: str
        pages: int = 0

    @structural
    class Shape(Variant):
        circle = case(radius=float)
        point = case()

    Book.Structure   # Struct[List[Field[str], List[Field[int], Empty]]]
    Book("T", 3).to()  # ('T', (3, ()))
    Shape.from_(Shape.circle(radius=1.0).to())  # Shape.circle(radius=1.0)

Products become dataclasses unless they already are one. Each sum case
becomes a frozen dataclass subclass of the sum; cases without parameters are
singleton values (``Shape.point``).
"""

from __future__ import annotations

import ast
import dataclasses
import inspect
import textwrap
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final, cast, overload

from .builder import annotation_resolver, field_types, structure_alias
from .canonical import CANONICAL_NAMESPACE
from .contracts import verified
from .derive import derive
from .errors import (
    DerivationError,
    SourceUnavailableError,
    UnsupportedDeclarationKindError,
    UnsupportedMemberShapeError,
)
from .extract import Declaration, DeclarationKind, EnumCase, extract_declaration
from .logging import StructuredLogger, get_logger

__all__ = ["Case", "Variant", "case", "structural"]

logger: StructuredLogger = get_logger(__name__, context={"component": "decorator"})

_PRODUCT_OPTIONS: Final[frozenset[str]] = frozenset(
    {"eq", "frozen", "order", "repr", "slots", "unsafe_hash"}
)


@dataclass(slots=True, frozen=True)
class Case:
    """Placeholder bound by ``case(...)`` until the sum is derived."""

    positional: tuple[object, ...] = ()
    labelled: Mapping[str, object] = field(default_factory=dict)


def case(*types: object, **labelled: object) -> Case:
    """Declare a sum case.

    Positional arguments are the types of unlabelled parameters and keyword
    arguments the types of labelled ones::

        number = case(int)
        pair = case(int, name=str)
        empty = case()
    """

    return Case(positional=types, labelled=dict(labelled))


class Variant:
    """Base class of sum types.

    Only the generated case classes can be instantiated; the sum itself
    (and ``Variant``) cannot.
    """

    __slots__ = ()

    def __new__(cls, *args: object, **kwargs: object) -> Any:
        if "__case__" not in cls.__dict__:
            raise TypeError(
                f"{cls.__qualname__} cannot be instantiated directly; "
                "construct one of its cases instead."
            )
        return super().__new__(cls)


@overload
def structural[T: type](cls: T, /) -> T: ...


@overload
def structural[T: type](
    cls: None = None, /, **options: bool
) -> Callable[[T], T]: ...


def structural[T: type](
    cls: T | None = None, /, **options: bool
) -> T | Callable[[T], T]:
    """Derive the canonical structure of a product or sum class.

    Usable bare (``@structural``) or with dataclass options for products
    (``@structural(frozen=True)``).

    Raises:
        DerivationError: The class cannot be derived.
        TypeError: ``options`` are unknown, or given for a sum or for an
            existing dataclass.
    """

    unknown = set(options) - _PRODUCT_OPTIONS
    if unknown:
        raise TypeError(f"Unknown structural options: {', '.join(sorted(unknown))}.")

    def wrap(target: T) -> T:
        return cast(T, _attach(target, options))

    if cls is None:
        return wrap
    return wrap(cls)


def _attach(target: object, options: Mapping[str, bool]) -> type:
    if not isinstance(target, type):
        raise UnsupportedDeclarationKindError(
            f"Only classes can be derived, not {type(target).__name__} objects."
        )
    declaration = extract_declaration(_class_syntax(target))
    derivation = derive(declaration)

    match declaration.kind:
        case DeclarationKind.PRODUCT:
            cls = _as_dataclass(target, options)
            _check_constructor(cls, declaration)
            resolved = _product_types(cls, declaration)
        case DeclarationKind.SUM:
            if options:
                raise TypeError("Dataclass options only apply to products.")
            if not issubclass(target, Variant):
                raise UnsupportedDeclarationKindError(
                    "Sums must subclass structural.Variant.",
                    declaration=declaration.name,
                )
            resolved = _install_cases(target, declaration)
            cls = target

    namespace: dict[str, Any] = {**CANONICAL_NAMESPACE, declaration.name: cls}
    module = ast.fix_missing_locations(
        ast.Module(body=derivation.runtime_members(), type_ignores=[])
    )
    code = compile(module, f"<structural:{cls.__qualname__}>", "exec")
    exec(code, namespace)  # nosec: B102

    to = namespace["to"]
    from_ = namespace["from_"].__func__
    for function in (to, from_):
        function.__qualname__ = f"{cls.__qualname__}.{function.__name__}"
        function.__module__ = cls.__module__
    checked_to, checked_from = verified(cls, to, from_)

    cls.Structure = _structure(declaration, resolved)  # type: ignore[attr-defined]
    cls.structure = namespace["structure"]  # type: ignore[attr-defined]
    cls.to = checked_to  # type: ignore[attr-defined]
    cls.from_ = checked_from  # type: ignore[attr-defined]
    cls.__structural__ = declaration  # type: ignore[attr-defined]

    logger.debug(
        "Attached derived members.",
        event="structural.attach",
        context={"class": cls.__qualname__, "module": cls.__module__},
    )
    return cls


def _class_syntax(cls: type) -> ast.ClassDef:
    try:
        lines, first_line = inspect.getsourcelines(cls)
    except (OSError, TypeError) as error:
        raise SourceUnavailableError(
            f"Cannot read the source of {cls.__qualname__}: {error}.",
            declaration=cls.__name__,
        ) from error
    tree = ast.parse(textwrap.dedent("".join(lines)))
    node = tree.body[0]
    if not isinstance(node, ast.ClassDef) or node.name != cls.__name__:
        raise SourceUnavailableError(
            f"The source found for {cls.__qualname__} does not define it.",
            declaration=cls.__name__,
        )
    ast.increment_lineno(node, first_line - 1)
    return node


def _as_dataclass(cls: type, options: Mapping[str, bool]) -> type:
    if dataclasses.is_dataclass(cls):
        if options:
            raise TypeError(
                f"{cls.__qualname__} is already a dataclass; "
                "pass options to @dataclass instead."
            )
        return cls
    return dataclass(cls, **options)


def _check_constructor(cls: type, declaration: Declaration) -> None:
    """Ensure every stored field is a positional ``__init__`` parameter."""

    specs = {spec.name: spec for spec in dataclasses.fields(cls)}
    for stored in declaration.fields:
        spec = specs.get(stored.name)
        if spec is None:
            problem = "is not a dataclass field"
        elif not spec.init:
            problem = "is excluded from __init__"
        elif spec.kw_only:
            problem = "is keyword-only"
        else:
            continue
        raise UnsupportedMemberShapeError(
            f"{stored.name!r} {problem}; the memberwise constructor "
            "passes every stored field by position.",
            declaration=declaration.name,
            member=stored.name,
            lineno=stored.lineno,
        )


def _product_types(cls: type, declaration: Declaration) -> dict[str, object]:
    """Map annotation sources to the resolved field types."""

    hints = field_types(cls)
    return {stored.annotation: hints[stored.name] for stored in declaration.fields}


def _install_cases(cls: type, declaration: Declaration) -> dict[str, object]:
    """Replace ``case(...)`` placeholders with case classes or singletons.

    Returns:
        The parameter types passed to ``case``, keyed by their source.
    """

    resolved: dict[str, object] = {}
    for enum_case in declaration.cases:
        marker = cls.__dict__.get(enum_case.name)
        if not isinstance(marker, Case):
            raise UnsupportedMemberShapeError(
                "Cases must be declared with structural.case().",
                declaration=declaration.name,
                member=enum_case.name,
                lineno=enum_case.lineno,
            )
        types = [*marker.positional, *marker.labelled.values()]
        for parameter, annotation in zip(enum_case.parameters, types, strict=True):
            resolved.setdefault(parameter.annotation, annotation)
        case_class = _case_class(cls, enum_case, marker)
        setattr(
            cls,
            enum_case.name,
            case_class() if not enum_case.parameters else case_class,
        )
    return resolved


def _case_class(cls: type, enum_case: EnumCase, marker: Case) -> type:
    fields = [
        *((f"_{position}", annotation) for position, annotation in enumerate(marker.positional)),
        *marker.labelled.items(),
    ]
    case_class = dataclasses.make_dataclass(
        enum_case.name,
        fields,
        bases=(cls,),
        namespace={"__case__": enum_case.name},
        frozen=True,
        module=cls.__module__,
    )
    case_class.__qualname__ = f"{cls.__qualname__}.{enum_case.name}"
    return case_class


def _structure(declaration: Declaration, resolved: Mapping[str, object]) -> object:
    resolve = annotation_resolver(declaration.name, resolved)
    try:
        return structure_alias(declaration, resolve)
    except TypeError as error:
        if isinstance(error, DerivationError):
            raise
        raise DerivationError(
            f"Cannot build the canonical type: {error}.",
            declaration=declaration.name,
        ) from error
