from __future__ import annotations

import math
from typing import Callable, Optional

import numpy as np

from track_pid.config import ControllerSettings, TrackingConfig
from track_pid.control.pid import Pid
from track_pid.control.twiddle import Twiddler, TwiddleParameter
from track_pid.utils.trial_log import TrialLog, TrialOutcome, TrialRecord

ControlCallback = Callable[[float, float], None]
ResetCallback = Callable[[], None]


def normalize_control(value: float) -> float:
    return float(np.clip(value, -1.0, 1.0))


class PidController:
    """
    Drives the vehicle along the track and, until good coefficients are
    found, tunes the PID gains with Twiddle.

    Two modes:
      - final coefficients: PidController(kp, ki, kd, off_track_cte)
      - search: PidController(kp, ki, kd, off_track_cte, dkp, dki, dkd, track_length)

    In search mode every frame is counted into the current trial. A trial
    ends when the car leaves the track (|cte| > off_track_cte), stalls
    (speed < stall_speed) or covers `track_length` meters. A finished trial
    that was not good enough is scored, the Twiddler proposes new gains and
    the simulator is asked to restart (`on_reset`). Once a lap is driven with
    max |cte| below off_track_cte / 2 the current gains are kept for good.

    `update` calls exactly one of `on_control(steering, throttle)` or
    `on_reset()` per frame.
    """

    def __init__(
        self,
        kp: float,
        ki: float,
        kd: float,
        off_track_cte: float = 5.0,
        dkp: Optional[float] = None,
        dki: Optional[float] = None,
        dkd: Optional[float] = None,
        track_length: Optional[float] = None,
        tracking: Optional[TrackingConfig] = None,
        verbose: bool = True,
    ):
        if not off_track_cte > 0:
            raise ValueError(f"off_track_cte doit être > 0 (reçu {off_track_cte}).")

        search_args = (dkp, dki, dkd, track_length)
        searching = any(a is not None for a in search_args)
        if searching and any(a is None for a in search_args):
            raise ValueError("dkp, dki, dkd and track_length must be given together.")
        if searching and not track_length > 0:
            raise ValueError(f"track_length doit être > 0 (reçu {track_length}).")

        self.tracking = tracking if tracking is not None else TrackingConfig()
        self.verbose = verbose
        self.off_track_cte = float(off_track_cte)
        self.track_length = float(track_length) if searching else 0.0

        self.distance = 0.0
        self.elapsed_time = 0.0
        self.max_cte = 0.0
        self.trials = TrialLog()

        self.pid = Pid(kp, ki, kd)
        self.twiddler: Optional[Twiddler] = None

        if searching:
            self.twiddler = Twiddler([
                TwiddleParameter(p=kp, dp=dkp),
                TwiddleParameter(p=ki, dp=dki),
                TwiddleParameter(p=kd, dp=dkd),
            ])
            self._log(f"🚀 Creating PID controller with initial coefficients Kp={kp}, Ki={ki}, "
                      f"Kd={kd}, dKp={dkp}, dKi={dki}, dKd={dkd}")
        else:
            self._log(f"🚀 Creating PID controller with final coefficients Kp={kp}, Ki={ki}, Kd={kd}")

    @classmethod
    def from_settings(cls, settings: ControllerSettings, verbose: bool = True) -> "PidController":
        pid = settings.pid
        if settings.twiddle is None:
            return cls(pid.kp, pid.ki, pid.kd, pid.off_track_cte,
                       tracking=settings.tracking, verbose=verbose)
        tw = settings.twiddle
        return cls(pid.kp, pid.ki, pid.kd, pid.off_track_cte,
                   tw.dkp, tw.dki, tw.dkd, tw.track_length,
                   tracking=settings.tracking, verbose=verbose)

    @property
    def has_final_coefficients(self) -> bool:
        return self.twiddler is None

    @property
    def coefficients(self) -> tuple:
        return self.pid.coefficients

    def update(self, cte: float, speed: float,
               on_control: ControlCallback, on_reset: ResetCallback) -> None:
        if not (math.isfinite(cte) and math.isfinite(speed)):
            raise ValueError(f"cte et speed doivent être finis (cte={cte}, speed={speed}).")

        if self.twiddler is not None:
            if self._track_trial(cte, speed):
                on_reset()
                return

        steering = normalize_control(self.pid.get_error(cte))
        throttle = 1.0
        if speed > self.tracking.brake_speed:
            # Freinage proportionnel à l'écart latéral
            throttle = normalize_control(
                1.0 - self.tracking.brake_gain * abs(cte) / self.off_track_cte)
        on_control(steering, throttle)

    # ------------------------------------------------------------------
    def _track_trial(self, cte: float, speed: float) -> bool:
        """Updates the current trial, returns True if the simulator must restart."""
        cfg = self.tracking
        self.distance += cfg.speed_to_distance * speed
        self.elapsed_time += cfg.seconds_per_frame

        if abs(cte) > self.max_cte and self.distance > self.track_length * cfg.max_cte_skip_part:
            self.max_cte = abs(cte)
            self._log(f"New max CTE {self.max_cte}")

        # Sortie de piste (ou arrêt du véhicule)
        if self.distance > cfg.min_measurement_distance and (
                abs(cte) > self.off_track_cte or speed < cfg.stall_speed):
            score = cfg.off_track_penalty / self.distance
            self._log(f"⚠️ Getting off track at distance {self.distance:.2f}, speed {speed}! "
                      f"(error value {score})")
            self._record(TrialOutcome.OFF_TRACK, speed, score=score)
            self._retune(score)
            return True

        # Piste terminée
        if self.distance > self.track_length:
            average_speed = self.distance / (self.elapsed_time * cfg.mph_to_mps)
            self._log(f"🏁 Max CTE is {self.max_cte} at distance {self.distance:.2f}m, "
                      f"time {self.elapsed_time:.2f}s, average speed {average_speed:.2f}mph.")
            if self.max_cte < self.off_track_cte / 2.0:
                self._log("✅ Using the final coefficients.")
                self._record(TrialOutcome.FINAL, speed, average_speed=average_speed)
                self.twiddler = None
                return False
            self._record(TrialOutcome.INCOMPLETE, speed,
                         average_speed=average_speed, score=self.max_cte)
            self._retune(self.max_cte)
            return True

        return False

    def _retune(self, score: float) -> None:
        parameters = self.twiddler.update_error(score)
        kp, ki, kd = (prm.p for prm in parameters)
        self._log(f"Trying PID coefficients {kp}, {ki}, {kd}")
        self.pid = Pid(kp, ki, kd)
        self.distance = 0.0
        self.elapsed_time = 0.0
        self.max_cte = 0.0

    def _record(self, outcome: TrialOutcome, speed: float,
                average_speed: Optional[float] = None, score: Optional[float] = None) -> None:
        kp, ki, kd = self.pid.coefficients
        self.trials.append(TrialRecord(
            trial=self.trials.next_index,
            kp=kp, ki=ki, kd=kd,
            outcome=outcome,
            distance=self.distance,
            time=self.elapsed_time,
            max_cte=self.max_cte,
            speed=speed,
            average_speed=average_speed,
            score=score,
        ))

    def _log(self, msg: str) -> None:
        if self.verbose:
            print(msg)
