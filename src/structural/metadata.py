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

"""Name metadata emitted alongside the canonical type.

Products::

    Struct(name='Book', properties=List(head=Field(name='title'), tail=List(head=Field(name='pages'), tail=Empty())))

Sums list their case names in declaration order, so a consumer walks the
metadata list in lockstep with a choice chain (``First`` reads the current
head, ``Second`` moves to the tail)::

    Sum(name='Shape', cases=List(head=Field(name='circle'), tail=List(head=Field(name='point'), tail=Empty())))
"""

from __future__ import annotations

import ast
from collections.abc import Sequence

from . import _syntax as syntax
from .extract import Declaration, DeclarationKind

__all__ = ["metadata_expr"]


def metadata_expr(declaration: Declaration) -> ast.expr:
    """Return the metadata constant of ``declaration`` as syntax."""

    name = syntax.const(declaration.name)
    match declaration.kind:
        case DeclarationKind.PRODUCT:
            labels = [stored.name for stored in declaration.fields]
            return syntax.call("Struct", name=name, properties=_labels(labels))
        case DeclarationKind.SUM:
            labels = [case.name for case in declaration.cases]
            return syntax.call("Sum", name=name, cases=_labels(labels))


def _labels(labels: Sequence[str]) -> ast.expr:
    return syntax.fold_right(
        labels,
        syntax.call("Empty"),
        lambda label, rest: syntax.call(
            "List",
            head=syntax.call("Field", name=syntax.const(label)),
            tail=rest,
        ),
    )
