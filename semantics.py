"""
While Denotational Semantics - Pure Functional Style
The meaning of a statement is a state transformer State -> State,
built compositionally from the meanings of its substatements.
"""

from typing import Callable, assert_never

import expressions
from syntax import Stm, Bexpr, Aexpr, Skip, Ass, Comp, If, While
from state import State, state_update
from error_handling import UndefinedStateError


# The set of partial functions State -> State is a chain complete partially
# ordered set; a functional maps one such function to another.
FunctionalStm = Callable[[State], State]
Predicate = Callable[[State], bool]
AexprEvaluator = Callable[[Aexpr, State], int]
BexprEvaluator = Callable[[Bexpr, State], bool]


# ============================================================================
# COMBINATORS
# ============================================================================

def identity(state: State) -> State:
  return state


def compose(f: FunctionalStm, g: FunctionalStm) -> FunctionalStm:
  """compose(f, g)(s) == f(g(s))"""
  def composed(state: State) -> State:
    return f(g(state))
  return composed


def cond(p: Predicate, g1: FunctionalStm, g2: FunctionalStm) -> FunctionalStm:
  """Apply g1 where p holds and g2 elsewhere; only one of them runs"""
  def conditional(state: State) -> State:
    return g1(state) if p(state) else g2(state)
  return conditional


def bottom(state: State) -> State:
  """The totally undefined state transformer"""
  raise UndefinedStateError()


# ============================================================================
# SEMANTIC FUNCTION
# ============================================================================

def create_semantic(
  eval_aexpr: AexprEvaluator = expressions.eval_aexpr,
  eval_bexpr: BexprEvaluator = expressions.eval_bexpr
) -> Callable[[Stm], FunctionalStm]:
  """Factory returning a semantic function bound to expression evaluators

  Evaluator errors propagate to the caller untouched. Nothing already
  computed is rolled back: states returned earlier stay valid because
  states are never mutated.
  """

  def semantic(stm: Stm) -> FunctionalStm:
    if isinstance(stm, Skip):
      return identity

    elif isinstance(stm, Ass):
      name, aexpr = stm.name, stm.aexpr

      def assign(state: State) -> State:
        # The right-hand side reads the state before the update
        return state_update(state, name, eval_aexpr(aexpr, state))
      return assign

    elif isinstance(stm, Comp):
      return compose(semantic(stm.stm2), semantic(stm.stm1))

    elif isinstance(stm, If):
      bexpr = stm.bexpr
      return cond(lambda state: eval_bexpr(bexpr, state),
                  semantic(stm.stm1),
                  semantic(stm.stm2))

    elif isinstance(stm, While):
      bexpr = stm.bexpr
      body = semantic(stm.stm)

      def loop(state: State) -> State:
        # Least fixed point of F(f) = cond(b, f . body, id), unrolled as a
        # plain loop so long runs do not grow the stack. Diverges when the
        # guard never becomes false.
        while eval_bexpr(bexpr, state):
          state = body(state)
        return state
      return loop

    else:
      assert_never(stm)

  return semantic


semantic = create_semantic()


def execute(stm: Stm, state: State) -> State:
  """Uncurried form: semantic(stm)(state)"""
  return semantic(stm)(state)


# ============================================================================
# FIXED POINT APPROXIMATION
# ============================================================================

def while_functional(
  bexpr: Bexpr,
  body: Stm,
  semantic_function: Callable[[Stm], FunctionalStm] = semantic,
  eval_bexpr: BexprEvaluator = expressions.eval_bexpr
) -> Callable[[FunctionalStm], FunctionalStm]:
  """The functional F(f) = cond(b, f . S[body], id) whose least fixed point
  is the meaning of `while b do body`"""
  body_semantic = semantic_function(body)

  def functional(f: FunctionalStm) -> FunctionalStm:
    return cond(lambda state: eval_bexpr(bexpr, state),
                compose(f, body_semantic),
                identity)
  return functional


def fixpoint_approximation(
  bexpr: Bexpr,
  body: Stm,
  n: int,
  semantic_function: Callable[[Stm], FunctionalStm] = semantic,
  eval_bexpr: BexprEvaluator = expressions.eval_bexpr
) -> FunctionalStm:
  """F^n(bottom): defined exactly on the states from which the loop
  finishes in fewer than n iterations, undefined elsewhere"""
  if n < 0:
    raise ValueError(f"Approximation index must be non-negative, got {n}")

  functional = while_functional(bexpr, body, semantic_function, eval_bexpr)
  approximation: FunctionalStm = bottom
  for _ in range(n):
    approximation = functional(approximation)
  return approximation
