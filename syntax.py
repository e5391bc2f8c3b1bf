"""
While language abstract syntax
Closed sets of arithmetic expressions, boolean expressions and statements,
as frozen dataclasses
"""

from typing import FrozenSet, List, Union, assert_never
from dataclasses import dataclass


# ============================================================================
# ARITHMETIC EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Num:
    value: int


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class Add:
    left: 'Aexpr'
    right: 'Aexpr'


@dataclass(frozen=True)
class Sub:
    left: 'Aexpr'
    right: 'Aexpr'


@dataclass(frozen=True)
class Mul:
    left: 'Aexpr'
    right: 'Aexpr'


Aexpr = Union[Num, Var, Add, Sub, Mul]


# ============================================================================
# BOOLEAN EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class TrueConst:
    pass


@dataclass(frozen=True)
class FalseConst:
    pass


@dataclass(frozen=True)
class BoolVar:
    """Variable read as a truth value"""
    name: str


@dataclass(frozen=True)
class Eq:
    left: Aexpr
    right: Aexpr


@dataclass(frozen=True)
class Le:
    left: Aexpr
    right: Aexpr


@dataclass(frozen=True)
class Lt:
    left: Aexpr
    right: Aexpr


@dataclass(frozen=True)
class Not:
    operand: 'Bexpr'


@dataclass(frozen=True)
class And:
    left: 'Bexpr'
    right: 'Bexpr'


@dataclass(frozen=True)
class Or:
    left: 'Bexpr'
    right: 'Bexpr'


Bexpr = Union[TrueConst, FalseConst, BoolVar, Eq, Le, Lt, Not, And, Or]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class Skip:
    pass


@dataclass(frozen=True)
class Ass:
    """Assignment name := aexpr"""
    name: str
    aexpr: Aexpr


@dataclass(frozen=True)
class Comp:
    """Sequential composition stm1; stm2"""
    stm1: 'Stm'
    stm2: 'Stm'


@dataclass(frozen=True)
class If:
    bexpr: Bexpr
    stm1: 'Stm'
    stm2: 'Stm'


@dataclass(frozen=True)
class While:
    bexpr: Bexpr
    stm: 'Stm'


Stm = Union[Skip, Ass, Comp, If, While]


def sequence(stms: List[Stm]) -> Stm:
    """Nest statements into right-leaning compositions"""
    if not stms:
        return Skip()
    result = stms[-1]
    for stm in reversed(stms[:-1]):
        result = Comp(stm, result)
    return result


# ============================================================================
# VARIABLES
# ============================================================================

def aexpr_variables(aexpr: Aexpr) -> FrozenSet[str]:
    if isinstance(aexpr, Num):
        return frozenset()
    elif isinstance(aexpr, Var):
        return frozenset([aexpr.name])
    elif isinstance(aexpr, (Add, Sub, Mul)):
        return aexpr_variables(aexpr.left) | aexpr_variables(aexpr.right)
    else:
        assert_never(aexpr)


def bexpr_variables(bexpr: Bexpr) -> FrozenSet[str]:
    if isinstance(bexpr, (TrueConst, FalseConst)):
        return frozenset()
    elif isinstance(bexpr, BoolVar):
        return frozenset([bexpr.name])
    elif isinstance(bexpr, (Eq, Le, Lt)):
        return aexpr_variables(bexpr.left) | aexpr_variables(bexpr.right)
    elif isinstance(bexpr, Not):
        return bexpr_variables(bexpr.operand)
    elif isinstance(bexpr, (And, Or)):
        return bexpr_variables(bexpr.left) | bexpr_variables(bexpr.right)
    else:
        assert_never(bexpr)


def free_variables(stm: Stm) -> FrozenSet[str]:
    """Names read anywhere in the statement"""
    if isinstance(stm, Skip):
        return frozenset()
    elif isinstance(stm, Ass):
        return aexpr_variables(stm.aexpr)
    elif isinstance(stm, Comp):
        return free_variables(stm.stm1) | free_variables(stm.stm2)
    elif isinstance(stm, If):
        return bexpr_variables(stm.bexpr) | free_variables(stm.stm1) | free_variables(stm.stm2)
    elif isinstance(stm, While):
        return bexpr_variables(stm.bexpr) | free_variables(stm.stm)
    else:
        assert_never(stm)


def assigned_variables(stm: Stm) -> FrozenSet[str]:
    """Names written by assignments in the statement"""
    if isinstance(stm, Skip):
        return frozenset()
    elif isinstance(stm, Ass):
        return frozenset([stm.name])
    elif isinstance(stm, Comp):
        return assigned_variables(stm.stm1) | assigned_variables(stm.stm2)
    elif isinstance(stm, If):
        return assigned_variables(stm.stm1) | assigned_variables(stm.stm2)
    elif isinstance(stm, While):
        return assigned_variables(stm.stm)
    else:
        assert_never(stm)


# ============================================================================
# CONCRETE SYNTAX
# ============================================================================

# Binding strength, higher binds tighter
_ARITH_PRECEDENCE = {Add: 1, Sub: 1, Mul: 2}
_ARITH_SYMBOL = {Add: "+", Sub: "-", Mul: "*"}
_COMPARISON_SYMBOL = {Eq: "=", Le: "<=", Lt: "<"}


def format_aexpr(aexpr: Aexpr, parent_precedence: int = 0) -> str:
    if isinstance(aexpr, Num):
        text = str(aexpr.value)
        return f"({text})" if aexpr.value < 0 and parent_precedence > 0 else text
    elif isinstance(aexpr, Var):
        return aexpr.name
    elif isinstance(aexpr, (Add, Sub, Mul)):
        precedence = _ARITH_PRECEDENCE[type(aexpr)]
        # Operators are left associative, so a right operand of equal
        # precedence needs parentheses
        left = format_aexpr(aexpr.left, precedence)
        right = format_aexpr(aexpr.right, precedence + 1)
        text = f"{left} {_ARITH_SYMBOL[type(aexpr)]} {right}"
        return f"({text})" if precedence < parent_precedence else text
    else:
        assert_never(aexpr)


def format_bexpr(bexpr: Bexpr, parent_precedence: int = 0) -> str:
    if isinstance(bexpr, TrueConst):
        return "true"
    elif isinstance(bexpr, FalseConst):
        return "false"
    elif isinstance(bexpr, BoolVar):
        return bexpr.name
    elif isinstance(bexpr, (Eq, Le, Lt)):
        symbol = _COMPARISON_SYMBOL[type(bexpr)]
        return f"{format_aexpr(bexpr.left)} {symbol} {format_aexpr(bexpr.right)}"
    elif isinstance(bexpr, Not):
        return f"not {format_bexpr(bexpr.operand, 3)}"
    elif isinstance(bexpr, And):
        text = f"{format_bexpr(bexpr.left, 2)} and {format_bexpr(bexpr.right, 3)}"
        return f"({text})" if parent_precedence > 2 else text
    elif isinstance(bexpr, Or):
        text = f"{format_bexpr(bexpr.left, 1)} or {format_bexpr(bexpr.right, 2)}"
        return f"({text})" if parent_precedence > 1 else text
    else:
        assert_never(bexpr)


def format_stm(stm: Stm) -> str:
    """Render a statement in concrete syntax the parser reads back"""
    if isinstance(stm, Skip):
        return "skip"
    elif isinstance(stm, Ass):
        return f"{stm.name} := {format_aexpr(stm.aexpr)}"
    elif isinstance(stm, Comp):
        return f"{_format_block_member(stm.stm1)}; {format_stm(stm.stm2)}"
    elif isinstance(stm, If):
        return (f"if {format_bexpr(stm.bexpr)} then {_format_branch(stm.stm1)} "
                f"else {_format_branch(stm.stm2)}")
    elif isinstance(stm, While):
        return f"while {format_bexpr(stm.bexpr)} do {_format_branch(stm.stm)}"
    else:
        assert_never(stm)


def _format_branch(stm: Stm) -> str:
    if isinstance(stm, (Skip, Ass)):
        return format_stm(stm)
    return "{ " + format_stm(stm) + " }"


def _format_block_member(stm: Stm) -> str:
    # A composition on the left of ';' must keep its grouping
    if isinstance(stm, Comp):
        return "{ " + format_stm(stm) + " }"
    return format_stm(stm)


def pretty_print_stm(stm: Stm, indent: int = 0) -> str:
    """Pretty print a statement tree for debugging"""
    pad = "  " * indent
    if isinstance(stm, Skip):
        return f"{pad}Skip\n"
    elif isinstance(stm, Ass):
        return f"{pad}Ass({stm.name} := {format_aexpr(stm.aexpr)})\n"
    elif isinstance(stm, Comp):
        return f"{pad}Comp\n" + pretty_print_stm(stm.stm1, indent + 1) + pretty_print_stm(stm.stm2, indent + 1)
    elif isinstance(stm, If):
        return (f"{pad}If({format_bexpr(stm.bexpr)})\n"
                + pretty_print_stm(stm.stm1, indent + 1)
                + pretty_print_stm(stm.stm2, indent + 1))
    elif isinstance(stm, While):
        return f"{pad}While({format_bexpr(stm.bexpr)})\n" + pretty_print_stm(stm.stm, indent + 1)
    else:
        assert_never(stm)
