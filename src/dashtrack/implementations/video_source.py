import logging
import threading
from pathlib import Path

import cv2
import numpy as np

from ..errors import FrameDecodeError
from ..interfaces import IVideoSource


class OpenCVVideoSource(IVideoSource):
    """cv2.VideoCapture 기반 비디오 소스"""

    def __init__(self, video_path: str):
        self.video_path = video_path
        self.logger = logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._cap = None
        if Path(video_path).is_file():
            self._cap = cv2.VideoCapture(video_path)
        else:
            self.logger.warning(f"비디오 파일에 접근할 수 없습니다: {video_path}")

    def is_readable(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def video_track_count(self) -> int:
        # OpenCV 는 트랙 목록을 노출하지 않으므로 프레임 크기로 비디오 스트림 유무를 판단
        if not self.is_readable():
            return 0
        width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        return 1 if width > 0 and height > 0 else 0

    def duration_seconds(self) -> float:
        if not self.is_readable():
            return 0.0
        fps = self._cap.get(cv2.CAP_PROP_FPS)
        frame_count = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT))
        return frame_count / fps if fps > 0 else 0.0

    def frame_at(self, seconds: float) -> np.ndarray:
        if not self.is_readable():
            raise FrameDecodeError(f"비디오가 열려 있지 않습니다: {self.video_path}")

        with self._lock:
            self._cap.set(cv2.CAP_PROP_POS_MSEC, seconds * 1000.0)
            success, frame = self._cap.read()

        if not success or frame is None:
            raise FrameDecodeError(f"{seconds:.3f}초 프레임 디코딩 실패")
        return frame

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
