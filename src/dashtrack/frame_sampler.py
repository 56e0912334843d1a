import logging
import math
import threading
from typing import Callable, Iterator, List, Optional, Tuple

import numpy as np

from .errors import AssetUnreadable, ExtractionCancelled, FrameDecodeError, NoVideoTrack
from .interfaces import IVideoSource

DEFAULT_INTERVAL_SECONDS = 1 / 30

# 디코딩에 실패한 프레임 자리를 채우는 빈 이미지
EMPTY_IMAGE = np.zeros((0, 0, 3), dtype=np.uint8)
EMPTY_IMAGE.flags.writeable = False

Frame = Tuple[int, np.ndarray]
ProgressCallback = Callable[[float], None]
FrameObserver = Callable[[float, np.ndarray], None]


def is_empty_image(image: Optional[np.ndarray]) -> bool:
    return image is None or image.size == 0


class FrameSampler:
    """Samples decoded frames from a video source at a fixed time interval."""

    def __init__(
        self,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        observer_every: int = 10,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive: {interval_seconds}")
        self.interval_seconds = interval_seconds
        self.observer_every = max(1, observer_every)
        self.logger = logging.getLogger(__name__)

    def total_frames(self, duration_seconds: float) -> int:
        return max(0, int(math.floor(duration_seconds * (1.0 / self.interval_seconds))))

    def sample(
        self,
        source: IVideoSource,
        progress_callback: Optional[ProgressCallback] = None,
        frame_observer: Optional[FrameObserver] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[Frame]:
        """Validate the source and return a lazy sequence of (index, image).

        Validation happens immediately, so asset errors are raised here and
        not on first iteration.

        Raises:
            AssetUnreadable: the source cannot be read
            NoVideoTrack: the source has no video track
        """
        if not source.is_readable():
            raise AssetUnreadable("Video file is not readable")
        if source.video_track_count() < 1:
            raise NoVideoTrack("No video tracks found in file")

        total = self.total_frames(source.duration_seconds())
        self.logger.info(
            f"Sampling {total} frames at {self.interval_seconds:.4f}s intervals"
        )
        return self._iter_frames(
            source, total, progress_callback, frame_observer, cancel_event
        )

    def collect(
        self,
        source: IVideoSource,
        progress_callback: Optional[ProgressCallback] = None,
        frame_observer: Optional[FrameObserver] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Frame]:
        """Decode and buffer every sampled frame before OCR starts."""
        return list(
            self.sample(source, progress_callback, frame_observer, cancel_event)
        )

    def _iter_frames(
        self,
        source: IVideoSource,
        total: int,
        progress_callback: Optional[ProgressCallback],
        frame_observer: Optional[FrameObserver],
        cancel_event: Optional[threading.Event],
    ) -> Iterator[Frame]:
        failed = 0
        for index in range(total):
            if cancel_event is not None and cancel_event.is_set():
                raise ExtractionCancelled(f"Frame sampling cancelled at frame {index}")

            seconds = index * self.interval_seconds
            try:
                image = source.frame_at(seconds)
            except FrameDecodeError as e:
                self.logger.warning(f"Failed to extract frame {index}: {str(e)}")
                image = EMPTY_IMAGE
                failed += 1

            progress = (index + 1) / total
            if progress_callback is not None:
                progress_callback(progress)

            if index % self.observer_every == 0 or index == total - 1:
                if frame_observer is not None and not is_empty_image(image):
                    frame_observer(progress, image)

            yield index, image

        if failed:
            self.logger.warning(f"{failed}/{total} frames could not be decoded")
