import pytest

from track_pid.control.twiddle import (
    AwaitingFirstScore,
    Decreasing,
    Increasing,
    Twiddler,
    TwiddleParameter,
)


def make_twiddler():
    return Twiddler([
        TwiddleParameter(p=1.0, dp=0.5),
        TwiddleParameter(p=2.0, dp=0.2),
        TwiddleParameter(p=3.0, dp=0.1),
    ])


def test_rejects_empty_parameters():
    with pytest.raises(ValueError):
        Twiddler([])


@pytest.mark.parametrize("dp", [0.0, -0.1, float("nan")])
def test_rejects_bad_steps(dp):
    with pytest.raises(ValueError):
        Twiddler([TwiddleParameter(p=1.0, dp=dp)])


def test_first_score_perturbs_first_parameter_up():
    tw = make_twiddler()
    assert isinstance(tw.phase, AwaitingFirstScore)

    params = tw.update_error(10.0)

    assert tw.best_score == 10.0
    assert tw.phase == Increasing(0)
    assert [p.p for p in params] == pytest.approx([1.5, 2.0, 3.0])


def test_failed_increase_tries_decrease_on_same_parameter():
    tw = make_twiddler()
    tw.update_error(10.0)
    params = tw.update_error(11.0)

    assert tw.phase == Decreasing(0)
    assert params[0].p == pytest.approx(0.5)
    assert params[0].dp == pytest.approx(0.5)
    assert tw.best_score == 10.0


def test_both_directions_failed_restores_and_shrinks_step():
    tw = make_twiddler()
    tw.update_error(10.0)
    tw.update_error(11.0)
    params = tw.update_error(12.0)

    assert params[0].p == pytest.approx(1.0)
    assert params[0].dp == pytest.approx(0.5 * 0.9)
    assert tw.phase == Increasing(1)
    assert params[1].p == pytest.approx(2.2)


def test_improvement_on_decrease_keeps_move_and_grows_step():
    tw = make_twiddler()
    tw.update_error(10.0)
    tw.update_error(11.0)
    params = tw.update_error(5.0)

    assert tw.best_score == 5.0
    assert params[0].p == pytest.approx(0.5)
    assert params[0].dp == pytest.approx(0.55)
    assert tw.phase == Increasing(1)
    assert params[1].p == pytest.approx(2.2)


def test_decreasing_scores_never_shrink_steps():
    tw = make_twiddler()
    initial = [p.dp for p in tw.parameters]

    for score in [100.0 - i for i in range(20)]:
        params = tw.update_error(score)
        for dp, dp0 in zip([p.dp for p in params], initial):
            assert dp >= dp0


def test_active_index_wraps_around():
    tw = make_twiddler()
    for score in (10.0, 9.0, 8.0, 7.0):
        tw.update_error(score)
    assert tw.phase == Increasing(0)


def test_equal_score_is_not_an_improvement():
    tw = make_twiddler()
    tw.update_error(10.0)
    tw.update_error(10.0)
    assert tw.phase == Decreasing(0)


def test_returned_parameters_are_copies():
    tw = make_twiddler()
    params = tw.update_error(10.0)
    params[0].p = 1000.0
    assert tw.parameters[0].p == pytest.approx(1.5)
