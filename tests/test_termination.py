from datetime import timedelta

from pydantic import ValidationError
import pytest

from openga.termination import (
    CustomTermination,
    MaximumDuration,
    MaximumEpochs,
    RunState,
    TargetFitness,
    TargetStandardDeviation,
)


def test_observe_summarises_fitness():
    state = RunState.observe(3, [1.0, 2.0, 3.0], elapsed=1.5, history=(0.5, 2.0))

    assert state.epoch == 3
    assert state.best_fitness == 3.0
    assert state.mean_fitness == pytest.approx(2.0)
    assert state.population_size == 3
    assert state.best_fitness_history == (0.5, 2.0, 3.0)
    assert state.elapsed_time == timedelta(seconds=1.5)


def test_run_state_is_frozen():
    state = RunState()
    with pytest.raises(ValidationError):
        state.epoch = 4


def test_maximum_epochs():
    strategy = MaximumEpochs(5)
    assert not strategy.should_stop(RunState(epoch=4))
    assert strategy.should_stop(RunState(epoch=5))


def test_maximum_duration_accepts_timedelta():
    strategy = MaximumDuration(timedelta(seconds=2))
    assert not strategy.should_stop(RunState(elapsed=1.9))
    assert strategy.should_stop(RunState(elapsed=2.0))


def test_target_fitness():
    strategy = TargetFitness(10.0)
    assert not strategy.should_stop(RunState(best_fitness=9.99))
    assert strategy.should_stop(RunState(best_fitness=10.0))


def test_target_standard_deviation_needs_two_observations():
    strategy = TargetStandardDeviation(target=0.1, window=3)
    assert not strategy.should_stop(RunState(best_fitness_history=(4.0,)))


def test_target_standard_deviation_uses_recent_window():
    strategy = TargetStandardDeviation(target=0.01, window=3)
    assert strategy.should_stop(RunState(best_fitness_history=(1.0, 7.0, 7.0, 7.0)))
    assert not strategy.should_stop(RunState(best_fitness_history=(1.0, 7.0, 7.0)))


def test_custom_termination():
    strategy = CustomTermination(lambda state: state.mean_fitness > 1)
    assert strategy.should_stop(RunState(mean_fitness=2.0))
    assert not strategy.should_stop(RunState(mean_fitness=0.5))


@pytest.mark.parametrize(
    "factory",
    [
        lambda: MaximumEpochs(0),
        lambda: MaximumDuration(0),
        lambda: MaximumDuration(timedelta(seconds=-1)),
        lambda: TargetStandardDeviation(-1.0),
        lambda: TargetStandardDeviation(0.1, window=1),
    ],
)
def test_invalid_parameters_raise(factory):
    with pytest.raises(ValueError):
        factory()
