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

"""Small constructors for the Python syntax trees emitted by derivations."""

from __future__ import annotations

import ast
from collections.abc import Callable, Sequence


def fold_right[M, A](
    members: Sequence[M], seed: A, layer: Callable[[M, A], A]
) -> A:
    """Fold ``members`` from the last to the first, starting from ``seed``."""

    result = seed
    for member in reversed(members):
        result = layer(member, result)
    return result


def name(identifier: str) -> ast.Name:
    return ast.Name(id=identifier, ctx=ast.Load())


def store(identifier: str) -> ast.Name:
    return ast.Name(id=identifier, ctx=ast.Store())


def const(value: object) -> ast.Constant:
    return ast.Constant(value=value, kind=None)


def attr(value: ast.expr | str, attribute: str) -> ast.Attribute:
    base = name(value) if isinstance(value, str) else value
    return ast.Attribute(value=base, attr=attribute, ctx=ast.Load())


def attr_path(root: str, *attributes: str) -> ast.expr:
    """Return ``root.a.b...`` for ``attributes``."""

    node: ast.expr = name(root)
    for attribute in attributes:
        node = attr(node, attribute)
    return node


def index(value: ast.expr, position: int) -> ast.Subscript:
    return ast.Subscript(value=value, slice=const(position), ctx=ast.Load())


def subscript(origin: str, *arguments: ast.expr) -> ast.Subscript:
    """Return ``origin[arguments]``, with a tuple slice for several arguments."""

    argument: ast.expr = (
        arguments[0]
        if len(arguments) == 1
        else ast.Tuple(elts=list(arguments), ctx=ast.Load())
    )
    return ast.Subscript(value=name(origin), slice=argument, ctx=ast.Load())


def call(
    func: ast.expr | str,
    /,
    *args: ast.expr,
    **keywords: ast.expr,
) -> ast.Call:
    return ast.Call(
        func=name(func) if isinstance(func, str) else func,
        args=list(args),
        keywords=[ast.keyword(arg=key, value=value) for key, value in keywords.items()],
    )


def tuple_of(*elements: ast.expr) -> ast.Tuple:
    return ast.Tuple(elts=list(elements), ctx=ast.Load())


def parse_expression(source: str) -> ast.expr:
    """Parse ``source`` (an annotation's source text) into an expression."""

    return ast.parse(source, mode="eval").body


def function(
    identifier: str,
    parameters: Sequence[str],
    body: Sequence[ast.stmt],
    *,
    decorators: Sequence[ast.expr] = (),
) -> ast.FunctionDef:
    return ast.FunctionDef(
        name=identifier,
        args=ast.arguments(
            posonlyargs=[],
            args=[
                ast.arg(arg=parameter, annotation=None, type_comment=None)
                for parameter in parameters
            ],
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=[],
        ),
        body=list(body),
        decorator_list=list(decorators),
        returns=None,
        type_comment=None,
        type_params=[],
    )


def unreachable_case() -> ast.match_case:
    """Return ``case _ as unreachable: assert_never(unreachable)``."""

    return ast.match_case(
        pattern=ast.MatchAs(
            pattern=ast.MatchAs(pattern=None, name=None), name="unreachable"
        ),
        guard=None,
        body=[assert_never("unreachable")],
    )


def assert_never(subject: str) -> ast.Expr:
    return ast.Expr(value=call("assert_never", name(subject)))
