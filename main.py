"""
While Language - Main Entry Point
Runs While programs under their denotational semantics
"""

import sys
import os
import argparse
from pathlib import Path
from typing import Dict, List, Optional, Tuple

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser
from syntax import pretty_print_stm
from state import State, make_state, format_state, format_value
from interpreter import create_interpreter
from error_handling import WhileParseError, WhileRuntimeError, BudgetExceededError


VERSION = "whilesem v0.1.0"


def parse_binding(text: str) -> Tuple[str, object]:
  """Parse a NAME=VALUE command line binding"""
  name, sep, raw = text.partition('=')
  name, raw = name.strip(), raw.strip()
  if not sep or not name or not raw:
    raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got '{text}'")
  if raw in ('true', 'false'):
    return name, raw == 'true'
  try:
    return name, int(raw)
  except ValueError:
    raise argparse.ArgumentTypeError(
      f"Value for '{name}' must be an integer, true or false, got '{raw}'"
    ) from None


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='whilesem',
      description='Denotational semantics evaluator for the While language',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s program.while                   # Run a program from the empty state
  %(prog)s program.while --set x=5         # Seed the initial state
  %(prog)s --parse program.while           # Show the statement tree
  %(prog)s --max-steps 1000 loop.while     # Give up after 1000 guard evaluations
  %(prog)s --timeout 2.5 loop.while        # Give up after 2.5 seconds
  %(prog)s -i                              # Interactive mode
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='While program file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the statement tree'
  )

  parser.add_argument(
      '--set',
      dest='bindings',
      metavar='NAME=VALUE',
      type=parse_binding,
      action='append',
      default=[],
      help='Bind a variable in the initial state (repeatable)'
  )

  parser.add_argument(
      '--max-steps',
      type=int,
      default=None,
      help='Stop after this many guard evaluations'
  )

  parser.add_argument(
      '--timeout',
      type=float,
      default=None,
      help='Stop after this many seconds'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def print_state(state: State) -> None:
  if not state:
    print("  (no bindings)")
  for name in sorted(state):
    print(f"  {name} = {format_value(state[name])}")


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a While program and show its statement tree"""
  parser = create_parser(debug)
  try:
    stm = parser.parse_file(script_path)
  except WhileParseError as e:
    print(f"Parse error in '{script_path}': {e}")
    sys.exit(1)
  print(pretty_print_stm(stm), end='')


def run_script_file(script_path: str, initial: Dict, max_steps: Optional[int] = None,
                    timeout: Optional[float] = None, debug: bool = False) -> None:
  """Run a While program file and print the final state"""
  interpreter = create_interpreter(debug)
  try:
    final = interpreter.interpret_file(script_path, initial, max_steps, timeout)
  except WhileParseError as e:
    print(f"Parse error in '{script_path}': {e}")
    sys.exit(1)
  except WhileRuntimeError as e:
    print(f"Runtime error in '{script_path}': {e.message}")
    sys.exit(1)
  except BudgetExceededError as e:
    print(f"'{script_path}' did not terminate within budget: {e.message}")
    sys.exit(1)

  print("Final state:")
  print_state(final)


def setup_readline() -> None:
  """Setup readline with history and keyword completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.whilesem_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First run or unreadable history
  readline.set_history_length(1000)

  completions = [
      "skip", "if", "then", "else", "while", "do",
      "true", "false", "not", "and", "or",
      ":state", ":reset", ":parse", ":help", "exit."
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def run_interactive_mode(initial: Dict, max_steps: Optional[int] = None,
                         timeout: Optional[float] = None, debug: bool = False) -> None:
  """Run statements one line at a time, threading the state through"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit.' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  interpreter = create_interpreter(debug)
  session_state = make_state(initial)

  while True:
    try:
      code = input("while> ").strip()
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if code == "exit.":
      break
    if not code:
      continue

    if code == ":state":
      print(format_state(session_state))
      continue

    if code == ":reset":
      session_state = make_state(initial)
      print("State reset")
      continue

    if code == ":help":
      print("REPL Commands:")
      print("  :parse <stm>      - Show the statement tree")
      print("  :state            - Show the current state")
      print("  :reset            - Go back to the initial state")
      print("  :help             - Show this help")
      print("  exit.             - Exit REPL")
      print()
      print("Statements:")
      print("  x := 1                        - Assignment")
      print("  skip                          - Do nothing")
      print("  S1; S2                        - Sequence")
      print("  if b then S1 else S2          - Conditional")
      print("  while b do { S }              - Loop")
      continue

    try:
      if code.startswith(":parse "):
        print(pretty_print_stm(interpreter.parse(code[7:], "<repl>")), end='')
        continue

      session_state = interpreter.interpret_program(
        code, session_state, max_steps, timeout, "<repl>"
      )
      print(format_state(session_state))
    except WhileParseError as e:
      print(e)
    except WhileRuntimeError as e:
      print(f"Runtime error: {e.message}")
    except BudgetExceededError as e:
      print(f"Did not terminate within budget: {e.message}")
    except KeyboardInterrupt:
      print("\nInterrupted, state unchanged")


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)
  initial = dict(args.bindings)

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, initial, args.max_steps, args.timeout, args.debug)

  elif args.interactive:
    run_interactive_mode(initial, args.max_steps, args.timeout, args.debug)

  else:
    arg_parser.print_help()


if __name__ == "__main__":
  main()
