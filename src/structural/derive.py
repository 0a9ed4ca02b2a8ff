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

"""Derivation driver combining the builder, emitter and generator."""

from __future__ import annotations

import ast
from dataclasses import dataclass

from . import _syntax as syntax
from .builder import structure_type
from .extract import (
    Declaration,
    extract_declaration,
    is_structural_decorator,
    structural_classes,
)
from .isomorphism import from_function, to_function
from .logging import StructuredLogger, get_logger
from .metadata import metadata_expr

__all__ = ["Derivation", "derive", "expand"]

logger: StructuredLogger = get_logger(__name__, context={"component": "derive"})


@dataclass(slots=True, frozen=True)
class Derivation:
    """Generated members of one declaration, as syntax.

    Attributes:
        declaration: The extracted declaration.
        structure_type: Canonical type, attached as ``Structure``.
        metadata: Name metadata, attached as ``structure``.
        to: ``def to(self)``.
        from_: ``@classmethod def from_(cls, s)``.
    """

    declaration: Declaration
    structure_type: ast.expr
    metadata: ast.expr
    to: ast.FunctionDef
    from_: ast.FunctionDef

    def members(self) -> list[ast.stmt]:
        """Return the generated class members in attachment order."""

        return [
            _assign("Structure", self.structure_type),
            *self.runtime_members(),
        ]

    def runtime_members(self) -> list[ast.stmt]:
        """Return the members compiled at attachment time.

        ``Structure`` is left out: its leaves refer to user names and are
        resolved separately, outside the canonical namespace.
        """

        return [_assign("structure", self.metadata), self.to, self.from_]

    def render(self) -> str:
        """Return the generated members as source text."""

        module = ast.Module(body=self.members(), type_ignores=[])
        return ast.unparse(ast.fix_missing_locations(module))


def derive(declaration: Declaration) -> Derivation:
    """Derive the canonical structure and conversions of ``declaration``."""

    derivation = Derivation(
        declaration=declaration,
        structure_type=structure_type(declaration),
        metadata=metadata_expr(declaration),
        to=to_function(declaration),
        from_=from_function(declaration),
    )
    logger.debug(
        "Derived canonical structure.",
        event="structural.derive",
        context={
            "declaration": declaration.name,
            "kind": declaration.kind.value,
            "members": len(declaration.fields) + len(declaration.cases),
            "skipped": list(declaration.skipped),
        },
    )
    return derivation


def expand(source: str) -> str:
    """Return ``source`` with every ``@structural`` class expanded in place.

    The decorator is removed from each derived class and the generated
    members are appended to its body, as they would be attached at
    class-definition time. Other statements are reproduced unchanged (modulo
    formatting and comments, which the syntax tree does not keep).

    Raises:
        DerivationError: A decorated class cannot be derived.
    """

    tree = ast.parse(source)
    for node in structural_classes(tree):
        derivation = derive(extract_declaration(node))
        node.decorator_list = [
            decorator
            for decorator in node.decorator_list
            if not is_structural_decorator(decorator)
        ]
        node.body = [*node.body, *derivation.members()]
    return ast.unparse(ast.fix_missing_locations(tree))


def _assign(target: str, value: ast.expr) -> ast.Assign:
    return ast.Assign(targets=[syntax.store(target)], value=value, type_comment=None)
