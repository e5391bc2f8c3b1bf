"""
Utilities module for the While evaluator
Value type checks, error message builders and operator factories
"""

from typing import Any, Callable

from error_handling import IllTypedOperandError


# ==================== TYPE CHECKING UTILITIES ====================

def value_type_name(value: Any) -> str:
  """
  Name of the semantic domain a value belongs to

  Args:
    value: Runtime value

  Returns:
    "Bool", "Num" or the Python type name for anything else

  Examples:
    value_type_name(3) -> "Num"
    value_type_name(True) -> "Bool"
  """
  # bool is a subclass of int, test it first
  if isinstance(value, bool):
    return "Bool"
  if isinstance(value, int):
    return "Num"
  return type(value).__name__


def is_num(value: Any) -> bool:
  return value_type_name(value) == "Num"


def is_bool(value: Any) -> bool:
  return isinstance(value, bool)


# ==================== ERROR MESSAGE BUILDERS ====================

def type_mismatch_error(
  context: str,
  expected: str,
  actual: Any
) -> IllTypedOperandError:
  """
  Generate type mismatch error

  Args:
    context: What required the value (e.g. "variable x")
    expected: Expected domain name
    actual: Actual value

  Returns:
    IllTypedOperandError with formatted message
  """
  actual_type = value_type_name(actual)
  return IllTypedOperandError(
    f"{context} requires {expected}, got {actual_type}",
    context,
    [actual_type]
  )


def operation_error(
  op: str,
  left: Any,
  right: Any
) -> IllTypedOperandError:
  """
  Generate operation error

  Args:
    op: Operation name
    left: Left operand value
    right: Right operand value

  Returns:
    IllTypedOperandError with formatted message
  """
  left_type = value_type_name(left)
  right_type = value_type_name(right)
  return IllTypedOperandError(
    f"Cannot {op} {left_type} and {right_type}",
    op,
    [left_type, right_type]
  )


# ==================== BINARY OPERATION FACTORIES ====================

def binary_arithmetic_op(
  op: Callable[[int, int], int],
  op_name: str
) -> Callable[[Any, Any], int]:
  """
  Factory for binary arithmetic operations over Num

  Args:
    op: Python operator function (e.g., operator.add)
    op_name: Name for error messages

  Returns:
    Function that performs the arithmetic operation

  Examples:
    while_add = binary_arithmetic_op(operator.add, "add")
    while_add(1, 2) -> 3
  """
  def arithmetic(x: Any, y: Any) -> int:
    if not (is_num(x) and is_num(y)):
      raise operation_error(op_name, x, y)
    return op(x, y)

  return arithmetic


def binary_comparison_op(
  op: Callable[[int, int], bool],
  op_name: str
) -> Callable[[Any, Any], bool]:
  """
  Factory for binary comparisons over Num

  Examples:
    while_lt = binary_comparison_op(operator.lt, "compare")
    while_lt(1, 2) -> True
  """
  def comparison(x: Any, y: Any) -> bool:
    if not (is_num(x) and is_num(y)):
      raise operation_error(op_name, x, y)
    return op(x, y)

  return comparison


def binary_logical_op(
  op: Callable[[bool, bool], bool],
  op_name: str
) -> Callable[[Any, Any], bool]:
  """Factory for binary connectives over Bool"""
  def logical(x: Any, y: Any) -> bool:
    if not (is_bool(x) and is_bool(y)):
      raise operation_error(op_name, x, y)
    return op(x, y)

  return logical
