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

"""Base exception hierarchy for :mod:`structural`."""

from __future__ import annotations

from typing import override


class StructuralError(Exception):
    """Base class for all structural exceptions.

    Catch this class to handle any library-specific failure with a single
    handler while letting standard Python exceptions propagate normally.

    Example:
        Deriving a class that may be malformed::

            try:
                Point = structural(Point)
            except StructuralError as e:
                logger.error("Derivation failed: %s", e)
                raise
    """


class DerivationError(StructuralError, TypeError):
    """Raised when a class declaration cannot be derived.

    Derivation errors surface at class-definition time (or from
    :func:`structural.expand`) and abort the derivation of the offending
    class as a whole: no partially derived members are ever attached.

    Attributes:
        declaration: Name of the class being derived, when known.
        member: Name of the offending member, when known.
        lineno: Source line of the offending member, relative to the parsed
            source, when known.

    Note:
        This exception also inherits from ``TypeError`` since a malformed
        declaration is an error in the shape of a type.
    """

    def __init__(
        self,
        message: str,
        *,
        declaration: str | None = None,
        member: str | None = None,
        lineno: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.declaration = declaration
        self.member = member
        self.lineno = lineno

    @override
    def __str__(self) -> str:
        location = ".".join(
            part for part in (self.declaration, self.member) if part is not None
        )
        if self.lineno is not None:
            location = f"{location} (line {self.lineno})".lstrip()
        if not location:
            return self.message
        return f"{location}: {self.message}"


class UnsupportedMemberShapeError(DerivationError):
    """Raised when a member declaration binds more than one name.

    Common causes:
        - ``a = b = 0`` in a product declaration
        - ``a = b = case()`` or ``a, b = case(), case()`` in a sum declaration
        - ``case(*types)`` or ``case(**labels)`` argument unpacking
        - ``InitVar`` pseudo-fields, which have no stored backing
    """


class UnsupportedPatternError(DerivationError):
    """Raised when a stored member's target is not a simple name.

    Tuple unpacking (``a, b = 1, 2``), attribute targets (``x.y: int``) and
    parenthesised targets (``(x): int``) cannot be mapped to a single field.
    """


class MissingTypeAnnotationError(DerivationError):
    """Raised when a product member has no explicit type annotation.

    Member types are never inferred from initialisers: ``count = 0`` must be
    written ``count: int = 0``.
    """


class UnsupportedDeclarationKindError(DerivationError):
    """Raised when the derived object is neither a product nor a sum.

    Functions, modules, Python enums, protocols, ``TypedDict`` and
    ``NamedTuple`` classes, and product classes inheriting from other classes
    cannot be derived.
    """


class SourceUnavailableError(DerivationError):
    """Raised when the source of a decorated class cannot be read.

    Derivation works on the class's source syntax, so classes created in an
    interactive session, through ``exec`` or with ``type()`` cannot be
    derived with the decorator. Use :func:`structural.expand` on the source
    text instead.
    """


class UnresolvedAnnotationError(DerivationError, NameError):
    """Raised when a member's type cannot be resolved when attaching.

    Annotations are resolved against the module globals of the class, the
    class itself and its type parameters. Quote forward references to names
    defined later in the module (``next: "Node"``).
    """


class IsomorphismViolationError(StructuralError, AssertionError):
    """Raised by verified conversions when the round-trip law fails.

    Only raised while verification is active (see
    :func:`structural.contracts.verification_active`). The usual cause is a
    custom ``__eq__`` on the derived class that does not compare fields by
    value.

    Attributes:
        subject: The value or canonical value the conversion received.
        result: The value the round trip produced.
    """

    def __init__(self, message: str, *, subject: object, result: object) -> None:
        super().__init__(message)
        self.subject = subject
        self.result = result


__all__ = [
    "DerivationError",
    "IsomorphismViolationError",
    "MissingTypeAnnotationError",
    "SourceUnavailableError",
    "StructuralError",
    "UnresolvedAnnotationError",
    "UnsupportedDeclarationKindError",
    "UnsupportedMemberShapeError",
    "UnsupportedPatternError",
]
