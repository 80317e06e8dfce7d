"""
Clarice Semantics Analysis
Single forward pass: types bound names, rejects unusable expressions,
stops at the first failure
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from error_handling import ClariceCheckError
from syntax import (
    As, BooleanLiteral, Do, EXPRESSION_TYPES, ExpressionStatement, FunctionCall,
    Identifier, IntegerLiteral, Iter, ListLiteral, Loop, Print, Program, STATEMENT_TYPES,
    Set, StringLiteral, Then, To, Where, With, render_expression, render_statement,
)
from utilities import dispatch_by_type, require_exhaustive


# ============================================================================
# DATA STRUCTURES
# ============================================================================

class Type(Enum):
  INTEGER = "Integer"
  DOUBLE = "Double"
  STRING = "String"
  BOOLEAN = "Boolean"
  CLOSURE = "Closure"
  LIST = "List"
  VOID = "Void"

  def __str__(self) -> str:
    return self.value


@dataclass(frozen=True)
class Symbol:
  name: str
  type: Type


class SymbolTable:
  """One flat name -> Symbol mapping; the last write for a name wins"""

  def __init__(self):
    self.symbols: Dict[str, Symbol] = {}

  def insert(self, name: str, symbol_type: Type) -> Symbol:
    symbol = Symbol(name, symbol_type)
    self.symbols[name] = symbol
    return symbol

  def lookup(self, name: str) -> Optional[Symbol]:
    return self.symbols.get(name)

  def __contains__(self, name: str) -> bool:
    return name in self.symbols

  def __len__(self) -> int:
    return len(self.symbols)

  def items(self):
    return self.symbols.items()


# ============================================================================
# EXPRESSION TYPING
# ============================================================================

def type_of_identifier(expression: Identifier, table: SymbolTable) -> Type:
  symbol = table.lookup(expression.name)
  if symbol is None:
    raise ClariceCheckError(f"Undefined variable `{expression.name}`")
  return symbol.type


def reject_expression(expression, table: SymbolTable) -> Type:
  raise ClariceCheckError(f"Invalid expression `{render_expression(expression)}`")


EXPRESSION_HANDLERS = {
    Identifier: type_of_identifier,
    IntegerLiteral: lambda e, table: Type.INTEGER,
    StringLiteral: lambda e, table: Type.STRING,
    BooleanLiteral: lambda e, table: Type.BOOLEAN,
    ListLiteral: reject_expression,
    FunctionCall: reject_expression,
}
require_exhaustive(EXPRESSION_HANDLERS, EXPRESSION_TYPES, "type_of_expression")


def type_of_expression(expression, table: SymbolTable) -> Type:
  """Resolve the type of an expression or raise ClariceCheckError"""
  return dispatch_by_type(expression, EXPRESSION_HANDLERS, table)


# ============================================================================
# STATEMENT CHECKING
# ============================================================================

def check_binding(statement, table: SymbolTable, debug: bool = False) -> None:
  """with / set / as / to: type the bound expression and record the name"""
  symbol = table.insert(statement.name, type_of_expression(statement.expression, table))
  if debug:
    print(f"Checking: bound {symbol.name} : {symbol.type}")


def check_then(statement: Then, table: SymbolTable, debug: bool = False) -> None:
  check_statement(statement.statement, table, debug)


def check_do(statement: Do, table: SymbolTable, debug: bool = False) -> None:
  check_block(statement.body, table, debug)


def check_print(statement: Print, table: SymbolTable, debug: bool = False) -> None:
  type_of_expression(statement.expression, table)


def check_where(statement: Where, table: SymbolTable, debug: bool = False) -> None:
  type_of_expression(statement.condition, table)
  check_block(statement.true_branch, table, debug)
  if statement.false_branch is not None:
    check_block(statement.false_branch, table, debug)


def check_loop(statement: Loop, table: SymbolTable, debug: bool = False) -> None:
  check_statement(statement.body, table, debug)


def check_iter(statement: Iter, table: SymbolTable, debug: bool = False) -> None:
  iterable_type = type_of_expression(statement.iterable, table)
  # a character of a String is a String; other iterables keep their own type
  table.insert(statement.variable, iterable_type)
  check_statement(statement.body, table, debug)


def check_expression_statement(statement: ExpressionStatement, table: SymbolTable,
                               debug: bool = False) -> None:
  type_of_expression(statement.expression, table)


STATEMENT_HANDLERS = {
    With: check_binding,
    Set: check_binding,
    As: check_binding,
    To: check_binding,
    Then: check_then,
    Do: check_do,
    Print: check_print,
    Where: check_where,
    Loop: check_loop,
    Iter: check_iter,
    ExpressionStatement: check_expression_statement,
}
require_exhaustive(STATEMENT_HANDLERS, STATEMENT_TYPES, "check_statement")


def check_statement(statement, table: SymbolTable, debug: bool = False) -> None:
  if debug:
    print(f"Checking: {type(statement).__name__}")
  dispatch_by_type(statement, STATEMENT_HANDLERS, table, debug)


def check_block(program: Program, table: SymbolTable, debug: bool = False) -> None:
  for statement in program.statements:
    check_statement(statement, table, debug)


def check_program(program: Program, debug: bool = False) -> SymbolTable:
  """
  Check a whole program in one forward pass.
  Returns the symbol table built along the way; raises ClariceCheckError
  naming the top-level statement that failed.
  """
  table = SymbolTable()
  for statement in program.statements:
    try:
      check_statement(statement, table, debug)
    except ClariceCheckError as e:
      if e.statement is not None:
        raise
      raise ClariceCheckError(e.message, render_statement(statement)) from e
  return table


# ============================================================================
# FACTORY FUNCTIONS (for compatibility with main.py)
# ============================================================================

class ClariceAnalyzer:
  """Runs the checker; each call uses a fresh symbol table"""

  def __init__(self, debug: bool = False):
    self.debug = debug

  def analyze(self, program: Program) -> SymbolTable:
    return check_program(program, self.debug)


def create_analyzer(debug: bool = False) -> ClariceAnalyzer:
  """Factory function returning an analyzer"""
  return ClariceAnalyzer(debug=debug)


def create_debug_analyzer() -> ClariceAnalyzer:
  """Factory function returning a debug analyzer"""
  return create_analyzer(debug=True)
