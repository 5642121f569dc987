import pytest
from rod_tickler.models.problem import Problem
from rod_tickler.models.step import Phase
from rod_tickler.models.step_sequence import Summary
from rod_tickler.solver import solve


@pytest.fixture
def classic():
    return solve(Problem(8, (1, 5, 8, 9, 10, 17, 17, 20)))


class TestStepSequence:
    """Read-only views over a solved trace"""

    def test_summary(self, classic):
        assert classic.summary() == Summary(
            total_steps=1 + 44 + 2 + 1,
            total_comparisons=36,
            max_profit=22,
            piece_count=2,
        )

    def test_stats_properties(self, classic):
        assert classic.total_steps == len(classic) == 48
        assert classic.total_comparisons == 36
        assert classic.max_profit == 22
        assert classic.piece_count == 2
        assert classic.last_index == 47

    def test_random_access(self, classic):
        assert classic.step(0).phase == Phase.INIT
        assert classic.step(classic.last_index).phase == Phase.COMPLETE
        assert classic[5] is classic.step(5)

    @pytest.mark.parametrize("index", [-1, 48, 100])
    def test_step_out_of_range(self, classic, index):
        with pytest.raises(IndexError, match="out of range"):
            classic.step(index)

    def test_iteration_order(self, classic):
        phases = [s.phase for s in classic]
        assert phases[0] == Phase.INIT
        assert phases[-3:] == [Phase.TRACEBACK, Phase.TRACEBACK, Phase.COMPLETE]

    def test_immutable(self, classic):
        with pytest.raises(AttributeError):
            classic.pieces = (8,)
        with pytest.raises(TypeError):
            classic.steps[0] = classic.steps[1]
