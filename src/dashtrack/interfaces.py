from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Sequence

import numpy as np

from .models import VideoItem


class RecognitionAccuracy(str, Enum):
    FAST = "fast"
    ACCURATE = "accurate"


class IVideoSource(ABC):
    """디코딩된 프레임을 시간 오프셋으로 제공하는 비디오 소스"""

    @abstractmethod
    def is_readable(self) -> bool:
        """소스를 읽을 수 있는지 확인"""
        pass

    @abstractmethod
    def video_track_count(self) -> int:
        """비디오 트랙 수"""
        pass

    @abstractmethod
    def duration_seconds(self) -> float:
        """재생 시간 (초)"""
        pass

    @abstractmethod
    def frame_at(self, seconds: float) -> np.ndarray:
        """지정 시각의 프레임 디코딩. 실패 시 FrameDecodeError"""
        pass

    def release(self) -> None:
        pass

    def __enter__(self) -> "IVideoSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class ITextRecognizer(ABC):
    @abstractmethod
    def recognize(
        self, image: np.ndarray, language: str, accuracy: RecognitionAccuracy
    ) -> List[str]:
        """이미지에서 텍스트 후보를 순위순으로 반환. 실패 시 RecognitionError"""
        pass


class IRouteWriter(ABC):
    @abstractmethod
    def save(self, video_items: Sequence[VideoItem], output_path: str) -> None:
        """비디오별 궤적을 파일로 저장"""
        pass
