"""
Clarice Standard Library
Runtime values and their textual rendering for `print`
"""

from dataclasses import dataclass
from typing import Optional, TextIO, Tuple, Union

from semantics import Type
from syntax import Expression, FunctionCall, ListLiteral, render_expression
from utilities import require_exhaustive


# ============================================================================
# VALUES
# ============================================================================

@dataclass(frozen=True)
class IntegerValue:
  value: int


@dataclass(frozen=True)
class DoubleValue:
  value: float


@dataclass(frozen=True)
class StringValue:
  value: str


@dataclass(frozen=True)
class BooleanValue:
  value: bool


@dataclass(frozen=True)
class ListValue:
  """Member expressions are kept unevaluated until something iterates them"""
  elements: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class DeferredCall:
  """
  The Closure value: a call that was written but is never dispatched.
  It is inert data; nothing in the runtime can invoke it.
  """
  name: str
  arguments: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class VoidValue:
  pass


Value = Union[IntegerValue, DoubleValue, StringValue, BooleanValue, ListValue, DeferredCall, VoidValue]
VALUE_TYPES = (IntegerValue, DoubleValue, StringValue, BooleanValue, ListValue, DeferredCall, VoidValue)

VOID = VoidValue()


VALUE_KINDS = {
    IntegerValue: Type.INTEGER,
    DoubleValue: Type.DOUBLE,
    StringValue: Type.STRING,
    BooleanValue: Type.BOOLEAN,
    ListValue: Type.LIST,
    DeferredCall: Type.CLOSURE,
    VoidValue: Type.VOID,
}
require_exhaustive(VALUE_KINDS, VALUE_TYPES, "value_type")


def value_type(value: Value) -> Type:
  """The checker type that describes a runtime value"""
  return VALUE_KINDS[type(value)]


# ============================================================================
# PRINT FUNCTIONS
# ============================================================================

SHOW_HANDLERS = {
    IntegerValue: lambda v: str(v.value),
    DoubleValue: lambda v: str(v.value),
    StringValue: lambda v: v.value,
    BooleanValue: lambda v: "true" if v.value else "false",
    ListValue: lambda v: render_expression(ListLiteral(v.elements)),
    DeferredCall: lambda v: render_expression(FunctionCall(v.name, v.arguments)),
    VoidValue: lambda v: "",
}
require_exhaustive(SHOW_HANDLERS, VALUE_TYPES, "clarice_show")


def clarice_show(value: Value) -> str:
  """Convert value to its printed text"""
  return SHOW_HANDLERS[type(value)](value)


def clarice_println(value: Value, stream: Optional[TextIO] = None) -> Value:
  """Print a value on its own line"""
  print(clarice_show(value), file=stream)
  return VOID
