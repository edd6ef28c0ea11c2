import pandas as pd
import pytest

from track_pid.utils.trial_log import TrialLog, TrialOutcome, TrialRecord


def make_log():
    log = TrialLog()
    log.append(TrialRecord(0, 0.1, 0.0, 1.0, TrialOutcome.OFF_TRACK, 12.0, 1.2, 0.0, 80.0, score=1e6 / 12.0))
    log.append(TrialRecord(1, 0.2, 0.0, 1.0, TrialOutcome.INCOMPLETE, 101.0, 6.0, 3.0, 75.0,
                           average_speed=37.6, score=3.0))
    log.append(TrialRecord(2, 0.2, 0.0, 1.1, TrialOutcome.FINAL, 101.0, 6.0, 1.0, 75.0, average_speed=37.6))
    return log


def test_best_is_lowest_score():
    log = make_log()
    assert len(log) == 3
    assert log.best().trial == 1
    assert TrialLog().best() is None


def test_to_dataframe():
    df = make_log().to_dataframe()
    assert list(df["outcome"]) == ["off_track", "incomplete", "final"]
    assert df["score"].isna().tolist() == [False, False, True]
    assert "average_speed" in df.columns


def test_empty_dataframe_keeps_columns():
    df = TrialLog().to_dataframe()
    assert df.empty
    assert "kp" in df.columns


def test_to_csv_roundtrip(tmp_path):
    path = make_log().to_csv(str(tmp_path / "runs" / "trials.csv"))
    df = pd.read_csv(path)
    assert len(df) == 3
    assert df.loc[1, "max_cte"] == pytest.approx(3.0)
