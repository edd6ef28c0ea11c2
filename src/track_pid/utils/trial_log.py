from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Iterator, List, Optional

import pandas as pd


class TrialOutcome(str, Enum):
    OFF_TRACK = "off_track"      # sortie de piste ou arrêt (speed < stall)
    INCOMPLETE = "incomplete"    # piste terminée mais CTE max trop grand
    FINAL = "final"              # coefficients retenus


@dataclass
class TrialRecord:
    trial: int
    kp: float
    ki: float
    kd: float
    outcome: TrialOutcome
    distance: float
    time: float
    max_cte: float
    speed: float
    average_speed: Optional[float] = None
    score: Optional[float] = None


class TrialLog:
    """
    Keeps one record per finished trial of the coefficient search.
    """
    def __init__(self):
        self._records: List[TrialRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TrialRecord]:
        return iter(self._records)

    def __getitem__(self, i) -> TrialRecord:
        return self._records[i]

    @property
    def next_index(self) -> int:
        return len(self._records)

    def append(self, record: TrialRecord) -> None:
        self._records.append(record)

    def best(self) -> Optional[TrialRecord]:
        """Trial with the lowest score (None if nothing was scored)."""
        scored = [r for r in self._records if r.score is not None]
        if not scored:
            return None
        return min(scored, key=lambda r: r.score)

    def to_dataframe(self) -> pd.DataFrame:
        columns = [f.name for f in fields(TrialRecord)]
        rows = []
        for r in self._records:
            row = asdict(r)
            row["outcome"] = r.outcome.value
            rows.append(row)
        return pd.DataFrame(rows, columns=columns)

    def to_csv(self, path: str) -> str:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        self.to_dataframe().to_csv(path, index=False)
        return path
