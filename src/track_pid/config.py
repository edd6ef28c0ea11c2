from __future__ import annotations

import math
import os
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional


# Valeurs limites acceptées par la couche config
MIN_OFF_TRACK_CTE = 0.1
MIN_TRACK_LENGTH = 50.0

METERS_IN_MILE = 1609.344

# Override possible via variable d'env:
#   TRACK_PID_ARGS="Kp Ki Kd offTrackCte [dKp dKi dKd trackLength]"
ENV_ARGS = "TRACK_PID_ARGS"

USAGE = (
    "Usage: " + ENV_ARGS + "='[Kp Ki Kd offTrackCte] [dKp dKi dKd trackLength]'\n"
    "  Kp          Proportional coefficient\n"
    "  Ki          Integral coefficient\n"
    "  Kd          Derivative coefficient\n"
    "  offTrackCte Approximate CTE when getting off track\n"
    "  dKp         Delta of Kp\n"
    "  dKi         Delta of Ki\n"
    "  dKd         Delta of Kd\n"
    "  trackLength Approximate track length in meters\n"
    "If empty, the default coefficients are used.\n"
    "If only [Kp Ki Kd offTrackCte] are provided, the PID controller uses those values.\n"
    "If [dKp dKi dKd trackLength] are also provided, the PID controller searches "
    "the best coefficients with the Twiddle algorithm."
)


def _check_finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} doit être fini (reçu {value}).")
    return value


# -----------------------------
# Gains PID
# -----------------------------
@dataclass
class PidConfig:
    kp: float = 0.12
    ki: float = 1e-5
    kd: float = 4.0
    off_track_cte: float = 5.0

    def __post_init__(self):
        for name in ("kp", "ki", "kd", "off_track_cte"):
            setattr(self, name, _check_finite(name, getattr(self, name)))
        if self.off_track_cte < 0:
            raise ValueError("offTrackCte may not be negative")
        if self.off_track_cte < MIN_OFF_TRACK_CTE:
            raise ValueError(f"offTrackCte must be greater than {MIN_OFF_TRACK_CTE}")


# -----------------------------
# Recherche Twiddle
# -----------------------------
@dataclass
class TwiddleConfig:
    dkp: float
    dki: float
    dkd: float
    track_length: float

    def __post_init__(self):
        for name in ("dkp", "dki", "dkd", "track_length"):
            setattr(self, name, _check_finite(name, getattr(self, name)))
        if min(self.dkp, self.dki, self.dkd) <= 0:
            raise ValueError("dKp, dKi and dKd must be strictly positive")
        if self.track_length < 0:
            raise ValueError("trackLength may not be negative")
        if self.track_length < MIN_TRACK_LENGTH:
            raise ValueError(f"trackLength must be greater than {MIN_TRACK_LENGTH}")

    @property
    def deltas(self) -> tuple:
        return self.dkp, self.dki, self.dkd


# -----------------------------
# Détection des fins d'essai
# -----------------------------
@dataclass(frozen=True)
class TrackingConfig:
    """
    Constants used to judge a trial.
    The simulator sends telemetry at a fixed cadence: `frame_rate` is what
    turns a speed reading (mph) into travelled distance (m).
    """

    frame_rate: float = 25.0
    min_measurement_distance: float = 5.0   # m, avant toute détection
    max_cte_skip_part: float = 0.025        # part de la piste ignorée au départ
    off_track_penalty: float = 1e6
    stall_speed: float = 1.0                # mph
    brake_speed: float = 60.0               # mph
    brake_gain: float = 4.0

    @property
    def seconds_per_frame(self) -> float:
        return 1.0 / self.frame_rate

    @property
    def mph_to_mps(self) -> float:
        return METERS_IN_MILE / 3600.0

    @property
    def speed_to_distance(self) -> float:
        """mph -> meters travelled during one frame."""
        return self.mph_to_mps / self.frame_rate


# -----------------------------
# Banc de simulation
# -----------------------------
@dataclass
class SimulationConfig:
    robot_length: float = 2.5       # m, empattement
    start_speed: float = 0.0        # mph
    max_speed: float = 80.0         # mph
    acceleration: float = 25.0      # mph/s à plein gaz
    drag: float = 2.0               # mph/s de décélération naturelle
    max_steering_angle: float = math.pi / 8.0


@dataclass
class ControllerSettings:
    pid: PidConfig = field(default_factory=PidConfig)
    twiddle: Optional[TwiddleConfig] = None
    tracking: TrackingConfig = field(default_factory=TrackingConfig)

    @property
    def searching(self) -> bool:
        return self.twiddle is not None


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> ControllerSettings:
    """
    Builds the controller settings from TRACK_PID_ARGS.
    0 values -> defaults, 4 values -> final coefficients,
    8 values -> initial coefficients + Twiddle search.
    """
    if environ is None:
        environ = os.environ
    raw = environ.get(ENV_ARGS, "").strip()
    tokens = [t for t in re.split(r"[\s,]+", raw) if t]

    if len(tokens) not in (0, 4, 8):
        raise ValueError(f"invalid number of arguments ({len(tokens)})\n{USAGE}")

    try:
        values = [float(t) for t in tokens]
    except ValueError as e:
        raise ValueError(f"invalid data format: {e}\n{USAGE}") from e

    try:
        if not values:
            return ControllerSettings()
        pid = PidConfig(*values[:4])
        twiddle = TwiddleConfig(*values[4:]) if len(values) == 8 else None
    except ValueError as e:
        raise ValueError(f"{e}\n{USAGE}") from e
    return ControllerSettings(pid=pid, twiddle=twiddle)
