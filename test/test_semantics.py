"""
Tests for the denotational semantics of While statements
"""

import pytest
from syntax import (
  Num, Var, Add, Sub, Mul, TrueConst, BoolVar, Eq, Le, Lt, Not,
  Skip, Ass, Comp, If, While
)
from state import make_state
from semantics import (
  semantic, execute, create_semantic, identity, compose, cond, bottom,
  while_functional, fixpoint_approximation
)
import expressions
from interpreter import run_bounded
from error_handling import (
  UnboundVariableError, IllTypedOperandError, UndefinedStateError, BudgetExceededError,
  WhileRuntimeError
)


def increment(name):
  return Ass(name, Add(Var(name), Num(1)))


# i := 0; while i < 3 do i := i + 1
COUNT_TO_THREE = Comp(Ass('i', Num(0)), While(Lt(Var('i'), Num(3)), increment('i')))

# y := 1; while not (x = 1) do { y := y * x; x := x - 1 }
FACTORIAL = Comp(
  Ass('y', Num(1)),
  While(Not(Eq(Var('x'), Num(1))),
        Comp(Ass('y', Mul(Var('y'), Var('x'))), Ass('x', Sub(Var('x'), Num(1)))))
)

SAMPLE_STATES = [
  make_state(),
  make_state(x=0),
  make_state(x=5, y=-2),
  make_state(x=3, flag=True),
]


class TestSkip:

  @pytest.mark.parametrize("state", SAMPLE_STATES)
  def test_skip_is_identity(self, state):
    assert semantic(Skip())(state) == state

  def test_skip_returns_same_state_object(self):
    state = make_state(x=1)
    assert semantic(Skip())(state) is state


class TestAssignment:

  def test_reads_pre_state(self):
    assert semantic(increment('x'))(make_state(x=5)) == {'x': 6}

  def test_binds_new_name(self):
    assert semantic(Ass('x', Num(7)))(make_state()) == {'x': 7}

  def test_input_state_is_untouched(self):
    before = make_state(x=5)
    after = semantic(increment('x'))(before)
    assert before == {'x': 5}
    assert after == {'x': 6}

  def test_evaluates_against_input_state_only(self):
    seen = []

    def probe(aexpr, state):
      seen.append(dict(state))
      return expressions.eval_aexpr(aexpr, state)

    semantic_with_probe = create_semantic(eval_aexpr=probe)
    semantic_with_probe(Ass('x', Add(Var('x'), Var('x'))))(make_state(x=2))
    assert seen == [{'x': 2}]


class TestComposition:

  def test_runs_left_to_right(self):
    stm = Comp(Ass('x', Num(1)), Ass('y', Add(Var('x'), Num(1))))
    assert execute(stm, make_state()) == {'x': 1, 'y': 2}

  def test_second_statement_sees_first_result(self):
    stm = Comp(Ass('x', Num(1)), Ass('x', Mul(Var('x'), Num(10))))
    assert execute(stm, make_state()) == {'x': 10}

  @pytest.mark.parametrize("state", SAMPLE_STATES)
  def test_associative(self, state):
    a = Ass('x', Num(2))
    b = Ass('y', Mul(Var('x'), Num(3)))
    c = Ass('x', Sub(Var('y'), Var('x')))
    left = Comp(Comp(a, b), c)
    right = Comp(a, Comp(b, c))
    assert semantic(left)(state) == semantic(right)(state)


class TestConditional:

  def test_true_branch(self):
    stm = If(Lt(Var('x'), Num(0)), Ass('sign', Num(-1)), Ass('sign', Num(1)))
    assert execute(stm, make_state(x=-5))['sign'] == -1

  def test_false_branch(self):
    stm = If(Lt(Var('x'), Num(0)), Ass('sign', Num(-1)), Ass('sign', Num(1)))
    assert execute(stm, make_state(x=5))['sign'] == 1

  def test_only_selected_branch_is_evaluated(self):
    calls = []

    def probe(aexpr, state):
      calls.append(aexpr)
      return expressions.eval_aexpr(aexpr, state)

    then_branch = Ass('y', Num(1))
    else_branch = Ass('y', Var('never_read'))
    stm = If(TrueConst(), then_branch, else_branch)
    state = make_state()

    result = create_semantic(eval_aexpr=probe)(stm)(state)
    assert result == semantic(then_branch)(state)
    assert calls == [Num(1)]

  def test_guard_is_read_from_input_state(self):
    stm = If(BoolVar('b'), Ass('x', Num(1)), Ass('x', Num(2)))
    assert execute(stm, make_state(b=False)) == {'b': False, 'x': 2}


class TestWhile:

  def test_counts_to_three_from_empty_state(self):
    assert execute(COUNT_TO_THREE, make_state()) == {'i': 3}

  def test_counts_to_three_from_seeded_state(self):
    assert execute(COUNT_TO_THREE, make_state(i=0)) == {'i': 3}

  def test_false_guard_returns_input(self):
    state = make_state(i=10)
    loop = While(Lt(Var('i'), Num(3)), increment('i'))
    assert semantic(loop)(state) is state

  def test_factorial(self):
    assert execute(FACTORIAL, make_state(x=5)) == {'x': 1, 'y': 120}

  @pytest.mark.parametrize("state", [make_state(x=n) for n in range(1, 7)])
  def test_unrolls_to_its_unfolding(self, state):
    guard = Not(Eq(Var('x'), Num(1)))
    body = Comp(Ass('y', Mul(Var('y'), Var('x'))), Ass('x', Sub(Var('x'), Num(1))))
    loop = While(guard, body)
    unfolded = If(guard, Comp(body, loop), Skip())
    seeded = execute(Ass('y', Num(1)), state)
    assert semantic(loop)(seeded) == semantic(unfolded)(seeded)

  def test_long_loop_does_not_grow_the_stack(self):
    loop = Comp(Ass('i', Num(0)), While(Lt(Var('i'), Num(50000)), increment('i')))
    assert execute(loop, make_state()) == {'i': 50000}

  def test_nested_loops(self):
    # total := 0; i := 0; while i < 3 do { j := 0; while j < 4 do { total := total + 1; j := j + 1 }; i := i + 1 }
    inner = While(Lt(Var('j'), Num(4)), Comp(increment('total'), increment('j')))
    outer = While(Lt(Var('i'), Num(3)), Comp(Ass('j', Num(0)), Comp(inner, increment('i'))))
    program = Comp(Ass('total', Num(0)), Comp(Ass('i', Num(0)), outer))
    assert execute(program, make_state())['total'] == 12


class TestNonTermination:
  """A diverging loop never returns; only an external budget stops it"""

  def test_while_true_skip_exhausts_step_budget(self):
    with pytest.raises(BudgetExceededError) as excinfo:
      run_bounded(While(TrueConst(), Skip()), make_state(), max_steps=1000)
    assert excinfo.value.steps == 1000

  def test_while_true_skip_exhausts_time_budget(self):
    with pytest.raises(BudgetExceededError) as excinfo:
      run_bounded(While(TrueConst(), Skip()), make_state(), timeout=0.05)
    assert excinfo.value.elapsed > 0.05

  def test_budget_error_is_not_a_semantic_error(self):
    with pytest.raises(BudgetExceededError) as excinfo:
      run_bounded(While(TrueConst(), Skip()), make_state(), max_steps=1)
    assert not isinstance(excinfo.value, WhileRuntimeError)

  def test_terminating_program_within_budget(self):
    assert run_bounded(COUNT_TO_THREE, make_state(), max_steps=4) == {'i': 3}

  def test_terminating_program_over_budget(self):
    with pytest.raises(BudgetExceededError):
      run_bounded(COUNT_TO_THREE, make_state(), max_steps=3)


class TestErrorPropagation:

  def test_unbound_variable_in_assignment(self):
    with pytest.raises(UnboundVariableError) as excinfo:
      execute(Ass('x', Add(Var('y'), Num(1))), make_state())
    assert excinfo.value.name == 'y'

  def test_error_object_passes_through_unchanged(self):
    failure = IllTypedOperandError("probe failure")

    def failing(aexpr, state):
      if aexpr == Var('bad'):
        raise failure
      return expressions.eval_aexpr(aexpr, state)

    program = Comp(Ass('x', Num(1)),
                   While(Lt(Var('x'), Num(3)),
                         If(Eq(Var('x'), Num(2)), Ass('y', Var('bad')), increment('x'))))
    with pytest.raises(IllTypedOperandError) as excinfo:
      create_semantic(eval_aexpr=failing)(program)(make_state())
    assert excinfo.value is failure

  def test_error_after_completed_statements_leaves_input_intact(self):
    state = make_state(x=1)
    program = Comp(Ass('x', Num(2)), Ass('z', Var('missing')))
    with pytest.raises(UnboundVariableError):
      execute(program, state)
    assert state == {'x': 1}

  def test_ill_typed_guard(self):
    with pytest.raises(IllTypedOperandError):
      execute(While(BoolVar('n'), Skip()), make_state(n=3))


class TestCombinators:

  def test_compose_applies_right_first(self):
    add_one = semantic(increment('x'))
    double = semantic(Ass('x', Mul(Var('x'), Num(2))))
    assert compose(double, add_one)(make_state(x=3)) == {'x': 8}
    assert compose(add_one, double)(make_state(x=3)) == {'x': 7}

  def test_cond_applies_one_side(self):
    chosen = cond(lambda s: s['x'] > 0, identity, bottom)
    assert chosen(make_state(x=1)) == {'x': 1}
    with pytest.raises(UndefinedStateError):
      chosen(make_state(x=0))


class TestFixpointApproximation:
  """F^n(bottom) approaches the meaning of while from below"""

  guard = Lt(Var('i'), Num(3))
  body = increment('i')

  def test_zeroth_approximation_is_bottom(self):
    approximation = fixpoint_approximation(self.guard, self.body, 0)
    with pytest.raises(UndefinedStateError):
      approximation(make_state(i=3))

  @pytest.mark.parametrize("start,iterations", [(3, 0), (2, 1), (1, 2), (0, 3)])
  def test_defined_when_enough_unrollings(self, start, iterations):
    state = make_state(i=start)
    approximation = fixpoint_approximation(self.guard, self.body, iterations + 1)
    assert approximation(state) == semantic(While(self.guard, self.body))(state)

  @pytest.mark.parametrize("start,iterations", [(2, 1), (0, 3)])
  def test_undefined_when_too_few_unrollings(self, start, iterations):
    approximation = fixpoint_approximation(self.guard, self.body, iterations)
    with pytest.raises(UndefinedStateError):
      approximation(make_state(i=start))

  def test_loop_meaning_is_a_fixed_point(self):
    functional = while_functional(self.guard, self.body)
    loop = semantic(While(self.guard, self.body))
    for start in range(-2, 5):
      state = make_state(i=start)
      assert functional(loop)(state) == loop(state)

  def test_negative_index_rejected(self):
    with pytest.raises(ValueError):
      fixpoint_approximation(self.guard, self.body, -1)

  def test_diverging_loop_is_undefined_at_every_approximation(self):
    for n in range(5):
      with pytest.raises(UndefinedStateError):
        fixpoint_approximation(TrueConst(), Skip(), n)(make_state())
