"""
While expression evaluators
Pure functions from (expression, state) to a Num or Bool value.
Errors: UnboundVariableError for names missing from the state,
IllTypedOperandError for values outside an operator's domain.
"""

from typing import Dict, Callable, Any, assert_never
import operator

from syntax import (
  Aexpr, Bexpr, Num, Var, Add, Sub, Mul,
  TrueConst, FalseConst, BoolVar, Eq, Le, Lt, Not, And, Or,
)
from state import State, state_lookup
from utilities import (
  binary_arithmetic_op,
  binary_comparison_op,
  binary_logical_op,
  type_mismatch_error,
  is_num,
  is_bool,
)


# ============================================================================
# OPERATOR TABLES
# ============================================================================

ARITHMETIC_OPS: Dict[type, Callable[[Any, Any], int]] = {
  Add: binary_arithmetic_op(operator.add, "add"),
  Sub: binary_arithmetic_op(operator.sub, "subtract"),
  Mul: binary_arithmetic_op(operator.mul, "multiply"),
}

COMPARISON_OPS: Dict[type, Callable[[Any, Any], bool]] = {
  Eq: binary_comparison_op(operator.eq, "compare (=)"),
  Le: binary_comparison_op(operator.le, "compare (<=)"),
  Lt: binary_comparison_op(operator.lt, "compare (<)"),
}

LOGICAL_OPS: Dict[type, Callable[[Any, Any], bool]] = {
  And: binary_logical_op(operator.and_, "and"),
  Or: binary_logical_op(operator.or_, "or"),
}


# ============================================================================
# EVALUATORS
# ============================================================================

def eval_aexpr(aexpr: Aexpr, state: State) -> int:
  """Value of an arithmetic expression in a state"""
  if isinstance(aexpr, Num):
    return aexpr.value
  elif isinstance(aexpr, Var):
    value = state_lookup(state, aexpr.name)
    if not is_num(value):
      raise type_mismatch_error(f"variable {aexpr.name}", "Num", value)
    return value
  elif isinstance(aexpr, (Add, Sub, Mul)):
    left = eval_aexpr(aexpr.left, state)
    right = eval_aexpr(aexpr.right, state)
    return ARITHMETIC_OPS[type(aexpr)](left, right)
  else:
    assert_never(aexpr)


def eval_bexpr(bexpr: Bexpr, state: State) -> bool:
  """Truth value of a boolean expression in a state"""
  if isinstance(bexpr, TrueConst):
    return True
  elif isinstance(bexpr, FalseConst):
    return False
  elif isinstance(bexpr, BoolVar):
    value = state_lookup(state, bexpr.name)
    if not is_bool(value):
      raise type_mismatch_error(f"variable {bexpr.name}", "Bool", value)
    return value
  elif isinstance(bexpr, (Eq, Le, Lt)):
    left = eval_aexpr(bexpr.left, state)
    right = eval_aexpr(bexpr.right, state)
    return COMPARISON_OPS[type(bexpr)](left, right)
  elif isinstance(bexpr, Not):
    return not eval_bexpr(bexpr.operand, state)
  elif isinstance(bexpr, (And, Or)):
    # Both sides are evaluated so errors do not depend on the left value
    left = eval_bexpr(bexpr.left, state)
    right = eval_bexpr(bexpr.right, state)
    return LOGICAL_OPS[type(bexpr)](left, right)
  else:
    assert_never(bexpr)
