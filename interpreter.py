"""
Clarice Interpreter
Tree-walking evaluator over a checked program. One mutable environment per run;
problems found while running are recorded as diagnostics and execution goes on.
"""

from typing import Any, Dict, List, Optional, TextIO, Tuple

from error_handling import Diagnostic, LoopLimitExceeded, make_diagnostic, report_diagnostic
from stdlib import (
  VOID,
  BooleanValue,
  DeferredCall,
  IntegerValue,
  ListValue,
  StringValue,
  Value,
  clarice_println,
  clarice_show,
  value_type,
)
from syntax import (
  As, BooleanLiteral, Do, EXPRESSION_TYPES, ExpressionStatement, FunctionCall,
  Identifier, IntegerLiteral, Iter, ListLiteral, Loop, Print, Program, STATEMENT_TYPES,
  Set, StringLiteral, Then, To, Where, With, render_statement,
)
from utilities import dispatch_by_type, require_exhaustive


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_runtime_env() -> Dict:
  """
  Create the run's environment: permanent bindings plus the stack of
  scopes opened by `with`, innermost last
  """
  return {
      'bindings': {},
      'scopes': []
  }


def make_execution_context(debug: bool = False, loop_limit: Optional[int] = None,
                           stream: Optional[TextIO] = None,
                           error_stream: Optional[TextIO] = None) -> Dict:
  """Create the per-run context: settings plus the diagnostics side channel"""
  return {
      'debug': debug,
      'loop_limit': loop_limit,
      'stream': stream,
      'error_stream': error_stream,
      'diagnostics': []
  }


# ============================================================================
# ENVIRONMENT OPERATIONS
# ============================================================================

def env_lookup_value(env: Dict, name: str) -> Optional[Value]:
  """Look a name up, innermost `with` scope first"""
  for scope in reversed(env['scopes']):
    if name in scope:
      return scope[name]
  return env['bindings'].get(name)


def env_assign_value(env: Dict, name: str, value: Value) -> None:
  """Bind permanently; an active `with` binding of the name is replaced too"""
  for scope in env['scopes']:
    scope.pop(name, None)
  env['bindings'][name] = value


def env_push_scope(env: Dict, name: str, value: Value) -> None:
  env['scopes'].append({name: value})


def env_pop_scope(env: Dict) -> None:
  env['scopes'].pop()


def env_snapshot(env: Dict) -> Dict[str, Value]:
  """Every visible binding, as lookups would resolve it"""
  visible = dict(env['bindings'])
  for scope in env['scopes']:
    visible.update(scope)
  return visible


def runtime_error(context: Dict, message: str, statement=None) -> Value:
  """Record a runtime diagnostic and yield the void placeholder"""
  where = render_statement(statement) if statement is not None else None
  diagnostic = make_diagnostic("runtime", message, where)
  context['diagnostics'].append(diagnostic)
  report_diagnostic(diagnostic, context['error_stream'])
  return VOID


# ============================================================================
# EXPRESSION EVALUATION
# ============================================================================

def eval_identifier(node: Identifier, env: Dict, context: Dict) -> Value:
  value = env_lookup_value(env, node.name)
  if value is None:
    return runtime_error(context, f"No variable `{node.name}` - use `with` or `set` to define it")
  return value


EXPRESSION_HANDLERS = {
    Identifier: eval_identifier,
    IntegerLiteral: lambda node, env, context: IntegerValue(node.value),
    StringLiteral: lambda node, env, context: StringValue(node.value),
    BooleanLiteral: lambda node, env, context: BooleanValue(node.value),
    ListLiteral: lambda node, env, context: ListValue(node.elements),
    FunctionCall: lambda node, env, context: DeferredCall(node.name, node.arguments),
}
require_exhaustive(EXPRESSION_HANDLERS, EXPRESSION_TYPES, "eval_expression")


def eval_expression(node, env: Dict, context: Dict) -> Value:
  """Evaluate an expression to a value"""
  if context['debug']:
    print(f"Evaluating: {type(node).__name__}")
  return dispatch_by_type(node, EXPRESSION_HANDLERS, env, context)


# ============================================================================
# STATEMENT EXECUTION
# ============================================================================

def exec_with(node: With, env: Dict, context: Dict) -> None:
  # Reached only when nothing follows the `with` in its sequence: the
  # binding has no statement to be visible in, so it is dropped at once
  eval_expression(node.expression, env, context)


def exec_set(node: Set, env: Dict, context: Dict) -> None:
  env_assign_value(env, node.name, eval_expression(node.expression, env, context))


def exec_as(node: As, env: Dict, context: Dict) -> None:
  runtime_error(context, "`as` cannot be used on its own - use `with name as value`", node)


def exec_to(node: To, env: Dict, context: Dict) -> None:
  runtime_error(context, "`to` cannot be used on its own - use `set name to value`", node)


def exec_then(node: Then, env: Dict, context: Dict) -> None:
  exec_statement(node.statement, env, context)


def exec_do(node: Do, env: Dict, context: Dict) -> None:
  exec_sequence(node.body, env, context)


def exec_print(node: Print, env: Dict, context: Dict) -> None:
  clarice_println(eval_expression(node.expression, env, context), context['stream'])


def exec_where(node: Where, env: Dict, context: Dict) -> None:
  condition = eval_expression(node.condition, env, context)
  if not isinstance(condition, BooleanValue):
    runtime_error(context, f"`where` needs a Boolean condition, got {value_type(condition)}", node)
    return
  if condition.value:
    exec_sequence(node.true_branch, env, context)
  elif node.false_branch is not None:
    exec_sequence(node.false_branch, env, context)


def exec_loop(node: Loop, env: Dict, context: Dict) -> None:
  """
  Run the body forever. There is no exit: only an interrupt from outside,
  or the caller's `loop_limit`, stops it.
  """
  limit = context['loop_limit']
  iterations = 0
  while True:
    if limit is not None and iterations >= limit:
      raise LoopLimitExceeded(limit)
    exec_statement(node.body, env, context)
    iterations += 1


def exec_iter(node: Iter, env: Dict, context: Dict) -> None:
  iterable = eval_expression(node.iterable, env, context)

  if isinstance(iterable, StringValue):
    for char in iterable.value:
      env_assign_value(env, node.variable, StringValue(char))
      exec_statement(node.body, env, context)
  elif isinstance(iterable, IntegerValue):
    # the count drives repetition only; the variable is left alone
    for _ in range(iterable.value):
      exec_statement(node.body, env, context)
  elif isinstance(iterable, ListValue):
    for element in iterable.elements:
      env_assign_value(env, node.variable, eval_expression(element, env, context))
      exec_statement(node.body, env, context)
  else:
    runtime_error(context, f"Cannot iterate over {value_type(iterable)} "
                           f"`{clarice_show(iterable)}`", node)


def exec_expression_statement(node: ExpressionStatement, env: Dict, context: Dict) -> None:
  eval_expression(node.expression, env, context)


STATEMENT_HANDLERS = {
    With: exec_with,
    Set: exec_set,
    As: exec_as,
    To: exec_to,
    Then: exec_then,
    Do: exec_do,
    Print: exec_print,
    Where: exec_where,
    Loop: exec_loop,
    Iter: exec_iter,
    ExpressionStatement: exec_expression_statement,
}
require_exhaustive(STATEMENT_HANDLERS, STATEMENT_TYPES, "exec_statement")


def exec_statement(node, env: Dict, context: Dict) -> None:
  """Execute one statement"""
  if context['debug']:
    print(f"Evaluating: {type(node).__name__}")
  dispatch_by_type(node, STATEMENT_HANDLERS, env, context)


def scoped_binding(node) -> Optional[With]:
  """The `with` a statement opens, looking through `then` wrappers"""
  while isinstance(node, Then):
    node = node.statement
  return node if isinstance(node, With) else None


def exec_at(statements: Tuple, index: int, env: Dict, context: Dict) -> int:
  """
  Execute the statement at `index` and return the index of the next one.
  A `with` binds its name for exactly the statement after it in the same
  sequence, so a chain of `with`s consumes the statement that ends it too.
  """
  opened = 0
  try:
    while True:
      node = statements[index]
      binding = scoped_binding(node)
      if binding is None:
        exec_statement(node, env, context)
        return index + 1

      value = eval_expression(binding.expression, env, context)
      index += 1
      if index >= len(statements):
        return index

      env_push_scope(env, binding.name, value)
      opened += 1
  finally:
    for _ in range(opened):
      env_pop_scope(env)


def exec_sequence(program: Program, env: Dict, context: Dict) -> None:
  """Execute a program's statements in order"""
  statements = program.statements
  index = 0
  while index < len(statements):
    index = exec_at(statements, index, env, context)


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def eval_program(program: Program, debug: bool = False, loop_limit: Optional[int] = None,
                 stream: Optional[TextIO] = None,
                 error_stream: Optional[TextIO] = None) -> Tuple[Dict, List[Diagnostic]]:
  """
  Run a checked program in a fresh environment.
  Returns (final_env, runtime diagnostics in the order they occurred)
  """
  env = make_runtime_env()
  context = make_execution_context(debug, loop_limit, stream, error_stream)
  try:
    exec_sequence(program, env, context)
  except RecursionError:
    runtime_error(context, "Program nests too deeply to run")
  return env, context['diagnostics']


# ============================================================================
# FACTORY FUNCTIONS (for compatibility with main.py)
# ============================================================================

class ClariceInterpreter:
  """Runs programs; keeps the environment of the most recent run for inspection"""

  def __init__(self, debug: bool = False, loop_limit: Optional[int] = None):
    self.debug = debug
    self.loop_limit = loop_limit
    self.environment: Dict[str, Any] = make_runtime_env()

  def run(self, program: Program, stream: Optional[TextIO] = None,
          error_stream: Optional[TextIO] = None) -> List[Diagnostic]:
    """Execute a program; `loop` without a limit never returns"""
    self.environment, diagnostics = eval_program(
        program, self.debug, self.loop_limit, stream, error_stream)
    return diagnostics


def create_interpreter(debug: bool = False, loop_limit: Optional[int] = None) -> ClariceInterpreter:
  """Factory function returning an interpreter"""
  return ClariceInterpreter(debug=debug, loop_limit=loop_limit)


def create_debug_interpreter(loop_limit: Optional[int] = None) -> ClariceInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True, loop_limit=loop_limit)
