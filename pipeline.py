"""
Clarice pipeline
text -> tokens -> AST -> checked AST -> output, one fresh run per call
"""

from dataclasses import dataclass
from typing import Optional, TextIO, Tuple, Union

from error_handling import ClariceCheckError, ClariceParseError, Diagnostic, make_diagnostic
from interpreter import create_debug_interpreter, create_interpreter
from parsing import create_debug_parser, create_parser
from semantics import create_analyzer, create_debug_analyzer
from syntax import Program


@dataclass(frozen=True)
class ParseError:
  """The text only parsed through recovery; nothing ran"""
  message: str
  diagnostics: Tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class CheckError:
  """The checker rejected the program; nothing ran"""
  message: str


@dataclass(frozen=True)
class Completed:
  """The program ran; output went to the stream as it was produced"""
  diagnostics: Tuple[Diagnostic, ...] = ()


Outcome = Union[ParseError, CheckError, Completed]

TOO_DEEP = "Program nests too deeply"


def compile_source(text: str, debug: bool = False) -> Program:
  """
  Parse and check source text.
  Raises ClariceParseError if recovery was needed anywhere, then
  ClariceCheckError for the first check failure.
  """
  parser = create_debug_parser() if debug else create_parser()
  try:
    result = parser.parse_string(text)
  except RecursionError:
    raise ClariceParseError([make_diagnostic("parse", TOO_DEEP)]) from None
  if result.diagnostics:
    raise ClariceParseError(result.diagnostics)

  analyzer = create_debug_analyzer() if debug else create_analyzer()
  try:
    analyzer.analyze(result.program)
  except RecursionError:
    raise ClariceCheckError(TOO_DEEP) from None
  return result.program


def evaluate_line(text: str, debug: bool = False, loop_limit: Optional[int] = None,
                  stream: Optional[TextIO] = None,
                  error_stream: Optional[TextIO] = None) -> Outcome:
  """
  Run one piece of program text with a fresh environment and symbol table.
  A program containing `loop` does not return unless `loop_limit` is set,
  in which case LoopLimitExceeded propagates once the limit is crossed.
  """
  try:
    program = compile_source(text, debug)
  except ClariceParseError as e:
    return ParseError(e.message, tuple(e.diagnostics))
  except ClariceCheckError as e:
    return CheckError(str(e))

  if debug:
    interpreter = create_debug_interpreter(loop_limit)
  else:
    interpreter = create_interpreter(loop_limit=loop_limit)
  diagnostics = interpreter.run(program, stream, error_stream)
  return Completed(tuple(diagnostics))
