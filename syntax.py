"""
Clarice abstract syntax tree
Pure data: frozen nodes, each owned by exactly one parent
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from utilities import require_exhaustive


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class IntegerLiteral:
    value: int


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class BooleanLiteral:
    value: bool


@dataclass(frozen=True)
class ListLiteral:
    elements: Tuple['Expression', ...] = ()


@dataclass(frozen=True)
class FunctionCall:
    name: str
    arguments: Tuple['Expression', ...] = ()


Expression = Union[Identifier, IntegerLiteral, StringLiteral, BooleanLiteral, ListLiteral, FunctionCall]
EXPRESSION_TYPES = (Identifier, IntegerLiteral, StringLiteral, BooleanLiteral, ListLiteral, FunctionCall)


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class Program:
    statements: Tuple['Statement', ...] = ()

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self):
        return iter(self.statements)


@dataclass(frozen=True)
class With:
    name: str
    expression: Expression


@dataclass(frozen=True)
class Set:
    name: str
    expression: Expression


@dataclass(frozen=True)
class As:
    name: str
    expression: Expression


@dataclass(frozen=True)
class To:
    name: str
    expression: Expression


@dataclass(frozen=True)
class Then:
    statement: 'Statement'


@dataclass(frozen=True)
class Do:
    body: Program


@dataclass(frozen=True)
class Print:
    expression: Expression


@dataclass(frozen=True)
class Where:
    condition: Expression
    true_branch: Program
    false_branch: Optional[Program] = None


@dataclass(frozen=True)
class Loop:
    body: 'Statement'


@dataclass(frozen=True)
class Iter:
    variable: str
    iterable: Expression
    body: 'Statement'


@dataclass(frozen=True)
class ExpressionStatement:
    expression: Expression


Statement = Union[With, Set, As, To, Then, Do, Print, Where, Loop, Iter, ExpressionStatement]
STATEMENT_TYPES = (With, Set, As, To, Then, Do, Print, Where, Loop, Iter, ExpressionStatement)


def placeholder_expression(description: str) -> StringLiteral:
    """Expression substituted by the parser for an unparseable one"""
    return StringLiteral(description)


def placeholder_statement(description: str) -> Print:
    """Statement substituted by the parser for an unparseable one"""
    return Print(placeholder_expression(description))


# ============================================================================
# SOURCE RENDERING
# ============================================================================

def _render_sequence(expressions) -> str:
    return ", ".join(render_expression(e) for e in expressions)


_EXPRESSION_RENDERERS = {
    Identifier: lambda e: e.name,
    IntegerLiteral: lambda e: str(e.value),
    StringLiteral: lambda e: f'"{e.value}"',
    BooleanLiteral: lambda e: "true" if e.value else "false",
    ListLiteral: lambda e: f"[{_render_sequence(e.elements)}]",
    FunctionCall: lambda e: f"{e.name}({_render_sequence(e.arguments)})",
}
require_exhaustive(_EXPRESSION_RENDERERS, EXPRESSION_TYPES, "render_expression")


def render_expression(expression: Expression) -> str:
    """Render an expression back to its literal source form"""
    return _EXPRESSION_RENDERERS[type(expression)](expression)


def _render_where(statement: Where) -> str:
    text = f"where {render_expression(statement.condition)} {render_program(statement.true_branch)}"
    if statement.false_branch is not None:
        text += f" otherwise {render_program(statement.false_branch)}"
    return text


_STATEMENT_RENDERERS = {
    With: lambda s: f"with {s.name} as {render_expression(s.expression)}",
    Set: lambda s: f"set {s.name} to {render_expression(s.expression)}",
    As: lambda s: f"as {s.name} {render_expression(s.expression)}",
    To: lambda s: f"to {s.name} {render_expression(s.expression)}",
    Then: lambda s: f"then {render_statement(s.statement)}",
    Do: lambda s: f"do {render_program(s.body)}",
    Print: lambda s: f"print {render_expression(s.expression)}",
    Where: _render_where,
    Loop: lambda s: f"loop {render_statement(s.body)}",
    Iter: lambda s: f"iter {s.variable} in {render_expression(s.iterable)} {render_statement(s.body)}",
    ExpressionStatement: lambda s: render_expression(s.expression),
}
require_exhaustive(_STATEMENT_RENDERERS, STATEMENT_TYPES, "render_statement")


def render_statement(statement: Statement) -> str:
    """Render a statement back to source text"""
    return _STATEMENT_RENDERERS[type(statement)](statement)


def render_program(program: Program) -> str:
    """Render a program back to source text, statements separated by spaces"""
    return " ".join(render_statement(s) for s in program.statements)


# ============================================================================
# DEBUG OUTPUT
# ============================================================================

def _children(node) -> list:
    """Labelled child nodes of an AST node, in source order"""
    if isinstance(node, Program):
        return [(None, s) for s in node.statements]
    if isinstance(node, (With, Set, As, To, Print, ExpressionStatement)):
        return [(None, node.expression)]
    if isinstance(node, Then):
        return [(None, node.statement)]
    if isinstance(node, (Do, Loop)):
        return [(None, node.body)]
    if isinstance(node, Where):
        children = [("condition", node.condition), ("then", node.true_branch)]
        if node.false_branch is not None:
            children.append(("otherwise", node.false_branch))
        return children
    if isinstance(node, Iter):
        return [("in", node.iterable), ("body", node.body)]
    if isinstance(node, ListLiteral):
        return [(None, e) for e in node.elements]
    if isinstance(node, FunctionCall):
        return [(None, e) for e in node.arguments]
    return []


def _label(node) -> str:
    if isinstance(node, (With, Set, As, To)):
        return f"{type(node).__name__}({node.name!r})"
    if isinstance(node, Iter):
        return f"Iter({node.variable!r})"
    if isinstance(node, FunctionCall):
        return f"FunctionCall({node.name!r})"
    if isinstance(node, Identifier):
        return f"Identifier({node.name!r})"
    if isinstance(node, (IntegerLiteral, StringLiteral, BooleanLiteral)):
        return f"{type(node).__name__}({node.value!r})"
    return type(node).__name__


def pretty_print_ast(node, indent: int = 0, label: Optional[str] = None) -> str:
    """Pretty print an AST node for debugging"""
    prefix = f"{label}: " if label else ""
    result = "  " * indent + prefix + _label(node) + "\n"

    for child_label, child in _children(node):
        result += pretty_print_ast(child, indent + 1, child_label)

    return result
