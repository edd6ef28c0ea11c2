from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Union

STEP_GROWTH = 1.1
STEP_SHRINK = 0.9


@dataclass
class TwiddleParameter:
    p: float   # valeur courante
    dp: float  # pas de perturbation


# -----------------------------
# Phase de l'essai en cours
# -----------------------------
@dataclass(frozen=True)
class AwaitingFirstScore:
    pass


@dataclass(frozen=True)
class Increasing:
    index: int


@dataclass(frozen=True)
class Decreasing:
    index: int


Phase = Union[AwaitingFirstScore, Increasing, Decreasing]


class Twiddler:
    """
    Coordinate-ascent search ("Twiddle") over a fixed list of parameters.

    Each call to `update_error` reports the score of the trial that was run
    with the last returned parameters (lower is better) and returns the
    parameters to try next. Only one parameter is perturbed at a time:

    - first score: it becomes the best score, parameter 0 is moved up by its step;
    - better score: keep the move, grow the step (x1.1), move to the next
      parameter and push it up;
    - worse after moving up: try the other side (-step from the baseline);
    - worse after moving down: restore the baseline, shrink the step (x0.9),
      move to the next parameter and push it up.

    The search never stops by itself, the caller decides when the current
    parameters are good enough. Not thread safe.
    """

    def __init__(self, parameters: Sequence[TwiddleParameter]):
        if len(parameters) == 0:
            raise ValueError("Twiddler needs at least one parameter.")
        for i, prm in enumerate(parameters):
            if not (math.isfinite(prm.p) and math.isfinite(prm.dp)):
                raise ValueError(f"Parameter {i} must be finite.")
            if prm.dp <= 0:
                raise ValueError(f"Step of parameter {i} must be > 0 (got {prm.dp}).")

        self._parameters: List[TwiddleParameter] = [replace(prm) for prm in parameters]
        self._best_score: Optional[float] = None
        self._phase: Phase = AwaitingFirstScore()

    @property
    def parameters(self) -> List[TwiddleParameter]:
        return [replace(prm) for prm in self._parameters]

    @property
    def best_score(self) -> Optional[float]:
        return self._best_score

    @property
    def phase(self) -> Phase:
        return self._phase

    def update_error(self, score: float) -> List[TwiddleParameter]:
        phase = self._phase

        if isinstance(phase, AwaitingFirstScore):
            self._best_score = score
            self._increase(0)
        elif score < self._best_score:
            self._best_score = score
            self._parameters[phase.index].dp *= STEP_GROWTH
            self._increase(self._next(phase.index))
        elif isinstance(phase, Increasing):
            prm = self._parameters[phase.index]
            prm.p -= 2.0 * prm.dp
            self._phase = Decreasing(phase.index)
        else:
            # Les deux sens ont échoué
            prm = self._parameters[phase.index]
            prm.p += prm.dp
            prm.dp *= STEP_SHRINK
            self._increase(self._next(phase.index))

        return self.parameters

    def _next(self, index: int) -> int:
        return (index + 1) % len(self._parameters)

    def _increase(self, index: int) -> None:
        prm = self._parameters[index]
        prm.p += prm.dp
        self._phase = Increasing(index)
