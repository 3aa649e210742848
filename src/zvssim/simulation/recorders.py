# src/zvssim/simulation/recorders.py
"""
Sinks for the samples emitted by the integrator inside the recording window.

A recorder is opened once per integration attempt and closed when the attempt
ends, diverged or not. Recorders never see samples from an earlier attempt.
"""
from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np

from .results import Waveform, WaveformSet

#: Names of the tracked quantities, in the order passed to `record()`.
SAMPLE_NAMES = ("vsec", "vc", "il2", "isource", "ic")


class SampleRecorder(ABC):
    """Receives (t, vsec, vc, il2, isource, ic) samples from one attempt."""

    def open(self) -> None:
        pass

    @abstractmethod
    def record(self, t: float, vsec: float, vc: float, il2: float, isource: float, ic: float) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class WaveformRecorder(SampleRecorder):
    """Keeps the samples in memory and exposes them as a `WaveformSet`."""

    def __init__(self):
        self._t: List[float] = []
        self._columns: List[List[float]] = [[] for _ in SAMPLE_NAMES]

    def open(self) -> None:
        self._t.clear()
        for column in self._columns:
            column.clear()

    def record(self, t, vsec, vc, il2, isource, ic):
        self._t.append(t)
        self._columns[0].append(vsec)
        self._columns[1].append(vc)
        self._columns[2].append(il2)
        self._columns[3].append(isource)
        self._columns[4].append(ic)

    def __len__(self) -> int:
        return len(self._t)

    def waveforms(self) -> WaveformSet:
        t = np.asarray(self._t, dtype=float)
        return WaveformSet(*(
            Waveform(name=name, t=t, values=np.asarray(column, dtype=float))
            for name, column in zip(SAMPLE_NAMES, self._columns)
        ))


class TeeRecorder(SampleRecorder):
    """Forwards every sample to several recorders."""

    def __init__(self, recorders: Sequence[SampleRecorder]):
        self.recorders = list(recorders)

    def open(self) -> None:
        for recorder in self.recorders:
            recorder.open()

    def record(self, t, vsec, vc, il2, isource, ic):
        for recorder in self.recorders:
            recorder.record(t, vsec, vc, il2, isource, ic)

    def close(self) -> None:
        for recorder in self.recorders:
            recorder.close()
