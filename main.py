"""
Clarice Programming Language - Main Entry Point
A small imperative scripting language: with, set, where, loop, iter
"""

import sys
import argparse
import os
from pathlib import Path
from typing import Optional

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import ClariceCheckError, LoopLimitExceeded, format_diagnostics
from lexing import KEYWORDS
from parsing import create_parser, create_debug_parser
from pipeline import CheckError, ParseError, evaluate_line
from syntax import pretty_print_ast


VERSION = "0.1.0"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Clarice Programming Language - a small imperative scripting language',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.clar               # Run a Clarice script
  %(prog)s -i                        # Interactive mode
  %(prog)s --parse script.clar       # Parse file and show AST
  %(prog)s --analyze script.clar     # Parse, check and show symbol table
  %(prog)s --loop-limit 10 s.clar    # Stop any `loop` after 10 passes
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Clarice script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show AST (for debugging)'
  )

  parser.add_argument(
      '--analyze',
      action='store_true',
      help='Parse and check file, show symbol table (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--loop-limit',
      type=int,
      default=None,
      metavar='N',
      help='Stop a `loop` statement after N passes (default: never)'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=f'Clarice v{VERSION}'
  )

  return parser


def read_script(script_path: str) -> str:
  """Read a script, exiting with a hint when it cannot be read"""
  try:
    return Path(script_path).read_text(encoding='utf-8')
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
    sys.exit(1)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    print(f"  Hint: Make sure you have read permissions for this file")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a Clarice script file and show the AST"""
  parser = create_debug_parser() if debug else create_parser()
  result = parser.parse_string(read_script(script_path))

  print(f"Parsed {len(result.program)} top-level statements:")
  print("=" * 50)
  print(pretty_print_ast(result.program), end='')

  if result.diagnostics:
    print(f"\n{len(result.diagnostics)} parse diagnostics:")
    print(format_diagnostics(result.diagnostics))
    sys.exit(1)


def analyze_file(script_path: str, debug: bool = False) -> None:
  """Parse and check a Clarice script file and show the symbol table"""
  parser = create_debug_parser() if debug else create_parser()
  source = read_script(script_path)

  try:
    result = parser.parse(source)
  except ClariceCheckError as e:
    print(f"Check error in '{script_path}': {e}")
    sys.exit(1)

  print(f"Checked {len(result.program)} top-level statements")
  if result.diagnostics:
    print(f"\n{len(result.diagnostics)} parse diagnostics:")
    print(format_diagnostics(result.diagnostics))
  print(f"\nSymbol table ({len(result.symbols)} names):")
  for name, symbol in result.symbols.items():
    print(f"  {name} : {symbol.type}")


def run_script_file(script_path: str, debug: bool = False, loop_limit: Optional[int] = None) -> None:
  """Run a Clarice script file as one program"""
  source = read_script(script_path)

  try:
    outcome = evaluate_line(source, debug=debug, loop_limit=loop_limit)
  except LoopLimitExceeded as e:
    print(f"Stopped: {e}")
    sys.exit(1)
  except Exception as e:
    print(f"Unexpected error while executing '{script_path}': {e}")
    if debug:
      import traceback
      traceback.print_exc()
    sys.exit(1)

  if isinstance(outcome, ParseError):
    print(f"Parse errors in '{script_path}':\n{outcome.message}")
    sys.exit(1)
  if isinstance(outcome, CheckError):
    print(f"{outcome.message}")
    sys.exit(1)


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  # Setup history file
  history_file = os.path.expanduser("~/.clarice_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = sorted(KEYWORDS | {"true", "false", "in", "exit", "help"})

  def completer(text, state):
    options = [word for word in completions if word.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  # Save history on exit
  import atexit
  atexit.register(readline.write_history_file, history_file)


def show_help() -> None:
  """Show interactive-mode help"""
  print("REPL Commands:")
  print("  help              - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  set x to 5 then print x        - Permanent binding")
  print("  with x as 5 print x            - Binding for the next statement only")
  print("  where true do print \"A\" otherwise do print \"B\"")
  print("  iter c in \"abc\" do print c     - One pass per character")
  print("  iter i in 3 do print \"hi\"      - Three passes")
  print("  loop do print \"x\"              - Runs until interrupted (Ctrl-C)")


def run_interactive_mode(debug: bool = False, loop_limit: Optional[int] = None) -> None:
  """Run Clarice in interactive mode; every line is a fresh program"""
  print(f"Clarice v{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, 'help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  while True:
    try:
      code = input("clarice> ").rstrip()
    except (KeyboardInterrupt, EOFError):
      print("\nOkay, shutting down the Clarice interactive mode.")
      break

    if code.strip() == "exit":
      print("Okay, shutting down the Clarice interactive mode.")
      break
    if code.strip() == "help":
      show_help()
      continue
    if not code.strip():
      continue

    try:
      outcome = evaluate_line(code, debug=debug, loop_limit=loop_limit)
    except KeyboardInterrupt:
      print("\nInterrupted")
      continue
    except LoopLimitExceeded as e:
      print(f"Stopped: {e}")
      continue
    except Exception as e:
      print(f"Unexpected error: {e}")
      if debug:
        import traceback
        traceback.print_exc()
      print("  Hint: If this keeps happening, try restarting or use --debug for more details")
      continue

    if isinstance(outcome, (ParseError, CheckError)):
      print(outcome.message)


def show_language_info() -> None:
  """Show Clarice language information"""
  print("Clarice Programming Language")
  print("=" * 50)
  print("A small imperative scripting language with:")
  print("• Permanent (set) and one-statement (with) bindings")
  print("• Conditionals (where / otherwise)")
  print("• Iteration over strings, counts and lists (iter)")
  print("• Unbounded repetition (loop)")
  print()


def main() -> None:
  """Main entry point for Clarice"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  # No arguments - show info and start interactive mode
  if len(sys.argv) == 1:
    show_language_info()
    run_interactive_mode()
    return

  if args.script:
    if args.parse:
      parse_file(args.script, debug=args.debug)
    elif args.analyze:
      analyze_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug, loop_limit=args.loop_limit)

  elif args.interactive:
    run_interactive_mode(debug=args.debug, loop_limit=args.loop_limit)

  else:
    arg_parser.print_help()
    print()
    show_language_info()


if __name__ == "__main__":
  main()
