"""
While Interpreter
Drives parsing and evaluation. Bounded execution and concurrent evaluation
live here, outside the semantic function, which stays unbounded and pure.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional
import time
import uuid
import pykka

import expressions
from syntax import Stm, Bexpr, pretty_print_stm
from state import State, make_state, format_state
from semantics import create_semantic, BexprEvaluator
from parsing import create_parser
from error_handling import BudgetExceededError


# ============================================================================
# EXTERNAL BUDGETS
# ============================================================================

def step_budget(eval_bexpr: BexprEvaluator, max_steps: int) -> BexprEvaluator:
  """Wrap a guard evaluator so that at most max_steps guards are evaluated

  Only loops can diverge and every iteration evaluates its guard, so
  counting guard evaluations bounds the whole run.
  """
  if max_steps < 0:
    raise ValueError(f"Step budget must be non-negative, got {max_steps}")
  steps = 0

  def budgeted(bexpr: Bexpr, state: State) -> bool:
    nonlocal steps
    if steps >= max_steps:
      raise BudgetExceededError(
        f"Did not terminate within {max_steps} steps", steps=steps
      )
    steps += 1
    return eval_bexpr(bexpr, state)

  return budgeted


def deadline_budget(
  eval_bexpr: BexprEvaluator,
  seconds: float,
  clock: Callable[[], float] = time.monotonic
) -> BexprEvaluator:
  """Wrap a guard evaluator so that evaluation stops after `seconds`"""
  if seconds < 0:
    raise ValueError(f"Time budget must be non-negative, got {seconds}")
  started = clock()

  def budgeted(bexpr: Bexpr, state: State) -> bool:
    elapsed = clock() - started
    if elapsed > seconds:
      raise BudgetExceededError(
        f"Did not terminate within {seconds} seconds", elapsed=elapsed
      )
    return eval_bexpr(bexpr, state)

  return budgeted


def run_bounded(
  stm: Stm,
  state: Optional[State] = None,
  max_steps: Optional[int] = None,
  timeout: Optional[float] = None,
  eval_bexpr: BexprEvaluator = expressions.eval_bexpr
) -> State:
  """Evaluate stm, raising BudgetExceededError once a budget runs out"""
  guard = eval_bexpr
  if max_steps is not None:
    guard = step_budget(guard, max_steps)
  if timeout is not None:
    guard = deadline_budget(guard, timeout)
  semantic = create_semantic(eval_bexpr=guard)
  return semantic(stm)(make_state() if state is None else state)


# ============================================================================
# CONCURRENT EVALUATION (Using Pykka)
# ============================================================================

class EvaluationActor(pykka.ThreadingActor):
  """Actor that evaluates one program per message"""

  # A diverging program must not keep the process alive
  use_daemon_thread = True

  def __init__(self, actor_id: str, debug: bool = False):
    super().__init__()
    self.actor_id = actor_id
    self.debug = debug

  def on_receive(self, message: Dict[str, Any]) -> Any:
    """Handle an evaluate command; errors travel back through the future"""
    command = message.get('command')
    if command != 'evaluate':
      raise ValueError(f"Unknown command for actor {self.actor_id}: {command}")

    if self.debug:
      print(f"Actor {self.actor_id} evaluating {type(message['stm']).__name__}")

    return run_bounded(
      message['stm'],
      message['state'],
      max_steps=message.get('max_steps'),
      timeout=message.get('timeout')
    )


def evaluate_concurrently(
  programs: List[Stm],
  state: Optional[State] = None,
  max_steps: Optional[int] = None,
  timeout: Optional[float] = None,
  debug: bool = False
) -> List[State]:
  """Evaluate several programs against one shared initial state

  Results come back in program order. The first evaluator or budget error
  is re-raised here.
  """
  initial = make_state() if state is None else state
  actors = [EvaluationActor.start(str(uuid.uuid4()), debug) for _ in programs]
  try:
    futures = [
      actor.ask({
        'command': 'evaluate',
        'stm': stm,
        'state': initial,
        'max_steps': max_steps,
        'timeout': timeout
      }, block=False)
      for actor, stm in zip(actors, programs)
    ]
    return [future.get() for future in futures]
  finally:
    for actor in actors:
      actor.stop(block=False)


# ============================================================================
# INTERPRETER
# ============================================================================

class WhileInterpreter:
  """Parses and runs While programs"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self.parser = create_parser(debug)

  def parse(self, source: str, filename: str = "<input>") -> Stm:
    stm = self.parser.parse_string(source, filename)
    if self.debug:
      print(pretty_print_stm(stm), end='')
    return stm

  def run(
    self,
    stm: Stm,
    state: Optional[Mapping] = None,
    max_steps: Optional[int] = None,
    timeout: Optional[float] = None
  ) -> State:
    """Run a statement; without budgets a diverging program never returns"""
    initial = make_state(state)
    if self.debug:
      print(f"Initial state: {format_state(initial)}")
    final = run_bounded(stm, initial, max_steps=max_steps, timeout=timeout)
    if self.debug:
      print(f"Final state: {format_state(final)}")
    return final

  def interpret_program(
    self,
    source: str,
    state: Optional[Mapping] = None,
    max_steps: Optional[int] = None,
    timeout: Optional[float] = None,
    filename: str = "<input>"
  ) -> State:
    """Parse source and run it from state"""
    return self.run(self.parse(source, filename), state, max_steps, timeout)

  def interpret_file(self, path: str, state: Optional[Mapping] = None,
                     max_steps: Optional[int] = None, timeout: Optional[float] = None) -> State:
    stm = self.parser.parse_file(path)
    if self.debug:
      print(pretty_print_stm(stm), end='')
    return self.run(stm, state, max_steps, timeout)

  def run_concurrently(
    self,
    sources: List[str],
    state: Optional[Mapping] = None,
    max_steps: Optional[int] = None,
    timeout: Optional[float] = None
  ) -> List[State]:
    programs = self.parser.parse_statements(sources)
    return evaluate_concurrently(programs, make_state(state), max_steps, timeout, self.debug)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False) -> WhileInterpreter:
  """Factory function returning an interpreter"""
  return WhileInterpreter(debug=debug)


def create_debug_interpreter() -> WhileInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
