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

"""Generation of the ``to``/``from_`` conversion pair.

Both functions are emitted as syntax, consistent with the canonical type of
:mod:`structural.builder`. For a product with fields ``foo`` and ``bar``::

    def to(self):
        return (self.foo, (self.bar, ()))

    @classmethod
    def from_(cls, s):
        return cls(s[0], s[1][0])

For a sum ``Sample`` with cases ``a = case(x=int)`` and ``b = case()``::

    def to(self):
        match self:
            case Sample.a(x0):
                return Sum(name='Sample', cases=Choice.first(List(head=Field(name='x', value=x0), tail=Empty())))
            case Sample.b:
                return Sum(name='Sample', cases=Choice.second(Choice.first(Empty())))
            case _ as unreachable:
                assert_never(unreachable)

    @classmethod
    def from_(cls, s):
        a0 = s.cases
        match a0:
            case First(f):
                return cls.a(x=f.head.value)
            case Second(a1):
                match a1:
                    case First(f):
                        return cls.b
                    case Second(a2):
                        assert_never(a2)

The case at position ``i`` sits under ``i`` ``Second`` layers. A sum without
cases reduces both functions to the exhaustiveness check alone.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence

from . import _syntax as syntax
from .extract import Declaration, DeclarationKind, EnumCase, StoredField

__all__ = ["from_function", "to_function"]

_SELF = "self"
_CLS = "cls"
_CANONICAL = "s"
_PAYLOAD = "f"


def to_function(declaration: Declaration) -> ast.FunctionDef:
    """Return ``def to(self)`` converting a value to its canonical form."""

    match declaration.kind:
        case DeclarationKind.PRODUCT:
            body: list[ast.stmt] = [ast.Return(value=_field_chain(declaration.fields))]
        case DeclarationKind.SUM:
            body = [_case_dispatch(declaration)]
    return syntax.function("to", [_SELF], body)


def from_function(declaration: Declaration) -> ast.FunctionDef:
    """Return ``def from_(cls, s)`` rebuilding a value from its canonical form."""

    match declaration.kind:
        case DeclarationKind.PRODUCT:
            body: list[ast.stmt] = [_memberwise_init(declaration.fields)]
        case DeclarationKind.SUM:
            body = [
                ast.Assign(
                    targets=[syntax.store("a0")],
                    value=syntax.attr(_CANONICAL, "cases"),
                    type_comment=None,
                ),
                *_choice_walk("a0", 0, declaration.cases),
            ]
    return syntax.function(
        "from_",
        [_CLS, _CANONICAL],
        body,
        decorators=[syntax.name("classmethod")],
    )


def _field_chain(fields: Sequence[StoredField]) -> ast.expr:
    return syntax.fold_right(
        fields,
        syntax.tuple_of(),
        lambda stored, rest: syntax.tuple_of(syntax.attr(_SELF, stored.name), rest),
    )


def _memberwise_init(fields: Sequence[StoredField]) -> ast.stmt:
    arguments: list[ast.expr] = []
    for depth in range(len(fields)):
        node: ast.expr = syntax.name(_CANONICAL)
        for _ in range(depth):
            node = syntax.index(node, 1)
        arguments.append(syntax.index(node, 0))
    return ast.Return(value=syntax.call(_CLS, *arguments))


def _case_dispatch(declaration: Declaration) -> ast.Match:
    cases = [
        ast.match_case(
            pattern=_case_pattern(declaration.name, case),
            guard=None,
            body=[
                ast.Return(
                    value=syntax.call(
                        "Sum",
                        name=syntax.const(declaration.name),
                        cases=_choice_path(position, _payload_value(case)),
                    )
                )
            ],
        )
        for position, case in enumerate(declaration.cases)
    ]
    return ast.Match(
        subject=syntax.name(_SELF),
        cases=[*cases, syntax.unreachable_case()],
    )


def _case_pattern(declaration: str, case: EnumCase) -> ast.pattern:
    constructor = syntax.attr_path(declaration, case.name)
    if not case.parameters:
        return ast.MatchValue(value=constructor)
    return ast.MatchClass(
        cls=constructor,
        patterns=[
            ast.MatchAs(pattern=None, name=_binding(position))
            for position in range(len(case.parameters))
        ],
        kwd_attrs=[],
        kwd_patterns=[],
    )


def _payload_value(case: EnumCase) -> ast.expr:
    def layer(position: int, rest: ast.expr) -> ast.expr:
        parameter = case.parameters[position]
        head: ast.expr = syntax.name(_binding(position))
        if parameter.label is not None:
            head = syntax.call("Field", name=syntax.const(parameter.label), value=head)
        return syntax.call("List", head=head, tail=rest)

    return syntax.fold_right(
        range(len(case.parameters)), syntax.call("Empty"), layer
    )


def _choice_path(position: int, payload: ast.expr) -> ast.expr:
    node: ast.expr = syntax.call(syntax.attr("Choice", "first"), payload)
    for _ in range(position):
        node = syntax.call(syntax.attr("Choice", "second"), node)
    return node


def _choice_walk(
    subject: str, depth: int, remaining: Sequence[EnumCase]
) -> list[ast.stmt]:
    if not remaining:
        return [syntax.assert_never(subject)]
    case, rest = remaining[0], remaining[1:]
    tail = f"a{depth + 1}"
    return [
        ast.Match(
            subject=syntax.name(subject),
            cases=[
                ast.match_case(
                    pattern=_wrapped("First", _PAYLOAD),
                    guard=None,
                    body=[ast.Return(value=_case_constructor(case))],
                ),
                ast.match_case(
                    pattern=_wrapped("Second", tail),
                    guard=None,
                    body=_choice_walk(tail, depth + 1, rest),
                ),
            ],
        )
    ]


def _wrapped(container: str, binding: str) -> ast.pattern:
    return ast.MatchClass(
        cls=syntax.name(container),
        patterns=[ast.MatchAs(pattern=None, name=binding)],
        kwd_attrs=[],
        kwd_patterns=[],
    )


def _case_constructor(case: EnumCase) -> ast.expr:
    constructor = syntax.attr(_CLS, case.name)
    if not case.parameters:
        return constructor
    positional: list[ast.expr] = []
    labelled: dict[str, ast.expr] = {}
    for position, parameter in enumerate(case.parameters):
        head = syntax.attr(_payload_path(position), "head")
        if parameter.label is None:
            positional.append(head)
        else:
            labelled[parameter.label] = syntax.attr(head, "value")
    return syntax.call(constructor, *positional, **labelled)


def _payload_path(depth: int) -> ast.expr:
    return syntax.attr_path(_PAYLOAD, *(["tail"] * depth))


def _binding(position: int) -> str:
    return f"x{position}"
