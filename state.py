"""
While program states - Pure Functional Style
A state is a read-only mapping from variable names to values.
Updates build a new mapping and never touch the old one.
"""

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from error_handling import UnboundVariableError


Value = Union[int, bool]
State = Mapping[str, Value]


# ============================================================================
# CONSTRUCTION
# ============================================================================

def make_state(bindings: Optional[Mapping[str, Value]] = None, **kwargs: Value) -> State:
  """Create an immutable state from initial bindings"""
  return MappingProxyType({**(bindings or {}), **kwargs})


# ============================================================================
# STATE OPERATIONS (Pure Functions)
# ============================================================================

def state_lookup(state: State, name: str) -> Value:
  """Look up the value bound to name"""
  try:
    return state[name]
  except KeyError:
    raise UnboundVariableError(name) from None


def state_update(state: State, name: str, value: Value) -> State:
  """Return new state with name bound to value"""
  return MappingProxyType({**state, name: value})


def state_bindings(state: State) -> Dict[str, Value]:
  """Plain dict copy of the bindings, safe to mutate or pickle"""
  return dict(state)


# ============================================================================
# DISPLAY
# ============================================================================

def format_value(value: Any) -> str:
  if isinstance(value, bool):
    return "true" if value else "false"
  return str(value)


def format_state(state: State) -> str:
  """Render a state as {x = 1, y = true}"""
  parts = [f"{name} = {format_value(state[name])}" for name in sorted(state)]
  return "{" + ", ".join(parts) + "}"
