import pytest

from track_pid.control.pid import Pid


def test_zero_gains_give_zero_output():
    pid = Pid(0.0, 0.0, 0.0)
    for cte in (1.0, -3.5, 42.0):
        assert pid.get_error(cte) == 0.0


def test_proportional_only():
    pid = Pid(0.5, 0.0, 0.0)
    assert pid.get_error(2.0) == pytest.approx(-1.0)
    assert pid.get_error(-2.0) == pytest.approx(1.0)


def test_control_law_over_two_frames():
    pid = Pid(0.1, 0.01, 1.0)
    # e=1 : -0.1*1 - 1*(1-0) - 0.01*1
    assert pid.get_error(1.0) == pytest.approx(-1.11)
    # e=0.5 : -0.1*0.5 - 1*(0.5-1) - 0.01*1.5
    assert pid.get_error(0.5) == pytest.approx(0.435)
    assert pid.integral == pytest.approx(1.5)
    assert pid.prev_error == pytest.approx(0.5)


def test_output_is_not_clamped():
    pid = Pid(10.0, 0.0, 0.0)
    assert pid.get_error(1.0) == pytest.approx(-10.0)


def test_coefficients():
    assert Pid(0.12, 1e-5, 4.0).coefficients == (0.12, 1e-5, 4.0)
