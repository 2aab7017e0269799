"""
Result of one :meth:`PPGProcessor.process` call.

Exactly one of four variants is returned; every variant carries a ``kind``
tag so callers can dispatch on it::

    result = processor.process()
    if result.kind is ResultKind.SUCCESS:
        show(result.bpm)
    elif result.kind is ResultKind.INSUFFICIENT:
        show_progress(result.progress_percent)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, List, Union

from camera_ppg.analysis.hrv import HRVMetrics


class ResultKind(Enum):
    SUCCESS = "success"
    INSUFFICIENT = "insufficient"   # buffer still filling
    INVALID = "invalid"             # signal rejected, with a reason
    ERROR = "error"                 # unexpected failure inside the pipeline


@dataclass(frozen=True)
class Success:
    kind: ClassVar[ResultKind] = ResultKind.SUCCESS

    bpm: float
    instantaneous_bpm: List[float]
    hrv: HRVMetrics
    confidence: float       # 0 – 100
    peak_count: int
    signal_quality: float   # 0 – 1


@dataclass(frozen=True)
class Insufficient:
    kind: ClassVar[ResultKind] = ResultKind.INSUFFICIENT

    progress: int
    required: int

    @property
    def progress_percent(self) -> int:
        if self.required <= 0:
            return 100
        return max(0, min(100, self.progress * 100 // self.required))


@dataclass(frozen=True)
class Invalid:
    kind: ClassVar[ResultKind] = ResultKind.INVALID

    reason: str
    confidence: float       # 0 – 100


@dataclass(frozen=True)
class Error:
    kind: ClassVar[ResultKind] = ResultKind.ERROR

    message: str


PPGResult = Union[Success, Insufficient, Invalid, Error]
