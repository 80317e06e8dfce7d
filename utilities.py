"""
Utilities module for the Clarice interpreter
Contains common helper functions shared by the pipeline stages
"""

from typing import Any, Callable, Dict, Iterable


I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1


# ==================== NUMERIC UTILITIES ====================

def parse_i64(text: str) -> int:
  """
  Parse a run of decimal digits as a 64-bit signed integer

  Args:
    text: Digits as scanned from the source

  Returns:
    The integer, or 0 when the text is not a valid i64 numeral

  Examples:
    parse_i64("42") -> 42
    parse_i64("99999999999999999999") -> 0
  """
  try:
    value = int(text, 10)
  except ValueError:
    return 0
  if value < I64_MIN or value > I64_MAX:
    return 0
  return value


# ==================== DISPATCH UTILITIES ====================

def require_exhaustive(handlers: Dict[type, Callable], kinds: Iterable[type], site: str) -> None:
  """
  Fail at import time if a dispatch table misses a node or value kind

  Args:
    handlers: Map of class to handler
    kinds: Every class of the closed union
    site: Name of the dispatch site for the error message

  Raises:
    TypeError naming the missing or unknown kinds
  """
  expected = set(kinds)
  missing = expected - set(handlers)
  unknown = set(handlers) - expected
  if missing or unknown:
    names = ", ".join(sorted(k.__name__ for k in missing | unknown))
    raise TypeError(f"{site} dispatch does not match its union: {names}")


def dispatch_by_type(
  node: Any,
  handlers: Dict[type, Callable],
  *args: Any
) -> Any:
  """
  Generic class-based dispatch

  Args:
    node: Dataclass instance to dispatch on
    handlers: Map of class to handler function
    *args: Extra arguments passed to the handler

  Returns:
    Result of calling the appropriate handler

  Raises:
    TypeError if no handler is registered for the node's class
  """
  handler = handlers.get(type(node))
  if handler is None:
    raise TypeError(f"No handler for {type(node).__name__}")
  return handler(node, *args)
