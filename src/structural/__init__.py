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

"""Structural derivation of product and sum types.

``@structural`` reads a class declaration once and attaches its canonical
type (``Structure``), its name metadata (``structure``) and the conversion
pair ``to``/``from_`` between the class and its canonical value::

    from structural import Variant, case, structural

    @structural
    class Book:
        title: str
        pages: int

    @structural
    class Shape(Variant):
        circle = case(radius=float)
        point = case()

Generic algorithms in :mod:`structural.generic` then work for every derived
class without extra code.
"""

from __future__ import annotations

from . import canonical, contracts, errors, generic
from .canonical import Choice, Empty, Field, First, List, Nothing, Second, Struct, Sum
from .contracts import verification_active, verification_enabled
from .decorator import Case, Variant, case, structural
from .derive import Derivation, derive, expand
from .errors import (
    DerivationError,
    IsomorphismViolationError,
    MissingTypeAnnotationError,
    SourceUnavailableError,
    StructuralError,
    UnresolvedAnnotationError,
    UnsupportedDeclarationKindError,
    UnsupportedMemberShapeError,
    UnsupportedPatternError,
)
from .extract import Declaration, DeclarationKind, extract_declaration
from .generic import edit, equal, is_structural, leaves, rebuild, show, view
from .logging import configure_logging, get_logger

__all__ = [
    "Case",
    "Choice",
    "Declaration",
    "DeclarationKind",
    "Derivation",
    "DerivationError",
    "Empty",
    "Field",
    "First",
    "IsomorphismViolationError",
    "List",
    "MissingTypeAnnotationError",
    "Nothing",
    "Second",
    "SourceUnavailableError",
    "Struct",
    "StructuralError",
    "Sum",
    "UnresolvedAnnotationError",
    "UnsupportedDeclarationKindError",
    "UnsupportedMemberShapeError",
    "UnsupportedPatternError",
    "Variant",
    "canonical",
    "case",
    "configure_logging",
    "contracts",
    "derive",
    "edit",
    "equal",
    "errors",
    "expand",
    "extract_declaration",
    "generic",
    "get_logger",
    "is_structural",
    "leaves",
    "rebuild",
    "show",
    "structural",
    "verification_active",
    "verification_enabled",
    "view",
]
