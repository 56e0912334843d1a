"""Shared fakes and builders for the dashtrack test suite."""

import threading
from typing import Dict, List, Optional, Set

import numpy as np
import pytest

from dashtrack.errors import FrameDecodeError, RecognitionError
from dashtrack.interfaces import ITextRecognizer, IVideoSource, RecognitionAccuracy
from dashtrack.models import ExtractionMethod, GPSPoint, Trajectory


def make_frame(value: int, height: int = 8, width: int = 12) -> np.ndarray:
    """A BGR frame whose pixels all carry ``value`` so fakes can identify it."""
    return np.full((height, width, 3), value % 256, dtype=np.uint8)


def valid(frame: int, lat: float, lon: float, method=ExtractionMethod.OCR) -> GPSPoint:
    return GPSPoint.from_values(frame, lat, lon, extraction_method=method)


def invalid(frame: int) -> GPSPoint:
    return GPSPoint(frame_number=frame)


def trajectory(*points: GPSPoint) -> Trajectory:
    return Trajectory(points=list(points))


class FakeVideoSource(IVideoSource):
    """In-memory video source; frame ``i`` is filled with the value ``i``."""

    def __init__(
        self,
        duration: float = 1.0,
        readable: bool = True,
        tracks: int = 1,
        failing_frames: Optional[Set[int]] = None,
        interval: float = 1 / 30,
    ):
        self.duration = duration
        self.readable = readable
        self.tracks = tracks
        self.failing_frames = failing_frames or set()
        self.interval = interval
        self.requested: List[float] = []
        self.released = False

    def is_readable(self) -> bool:
        return self.readable

    def video_track_count(self) -> int:
        return self.tracks

    def duration_seconds(self) -> float:
        return self.duration

    def frame_at(self, seconds: float) -> np.ndarray:
        self.requested.append(seconds)
        index = int(round(seconds / self.interval))
        if index in self.failing_frames:
            raise FrameDecodeError(f"cannot decode frame {index}")
        return make_frame(index)

    def release(self) -> None:
        self.released = True


class FakeRecognizer(ITextRecognizer):
    """Returns canned candidates keyed by the pixel value of the crop."""

    def __init__(
        self,
        texts: Optional[Dict[int, List[str]]] = None,
        failing: Optional[Set[int]] = None,
    ):
        self.texts = texts or {}
        self.failing = failing or set()
        self.calls: List[int] = []
        self._lock = threading.Lock()

    def recognize(
        self, image: np.ndarray, language: str, accuracy: RecognitionAccuracy
    ) -> List[str]:
        key = int(image.flat[0])
        with self._lock:
            self.calls.append(key)
        if key in self.failing:
            raise RecognitionError(f"engine failed on {key}")
        return list(self.texts.get(key, []))


@pytest.fixture
def fake_source():
    return FakeVideoSource()


@pytest.fixture
def fake_recognizer():
    return FakeRecognizer()
