import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence

import numpy as np

from .coordinate_parser import CoordinateParser
from .errors import ExtractionCancelled, RecognitionError
from .frame_sampler import Frame, is_empty_image
from .interfaces import ITextRecognizer, RecognitionAccuracy
from .models import CUSTOM_GPS_REGION, Coordinate, ExtractionMethod, GPSPoint, OCRRegion, Trajectory
from .region_cropper import RegionCropper

# (원본 이미지, 사용한 영역, 크롭 이미지)
DiagnosticsObserver = Callable[[np.ndarray, OCRRegion, np.ndarray], None]
ProgressCallback = Callable[[float], None]

PROGRESS_UPDATES = 10


class ExtractionCoordinator:
    """프레임 묶음에서 OCR 로 좌표를 추출해 프레임 순서의 궤적을 만든다"""

    def __init__(
        self,
        recognizer: ITextRecognizer,
        region: OCRRegion = CUSTOM_GPS_REGION,
        parser: Optional[CoordinateParser] = None,
        cropper: Optional[RegionCropper] = None,
        max_workers: Optional[int] = None,
        language: str = "eng",
        accuracy: RecognitionAccuracy = RecognitionAccuracy.ACCURATE,
    ):
        self.recognizer = recognizer
        self.region = region
        self.parser = parser or CoordinateParser()
        self.cropper = cropper or RegionCropper()
        self.max_workers = max_workers or os.cpu_count() or 1
        self.language = language
        self.accuracy = accuracy
        self.logger = logging.getLogger(__name__)

    def extract_points(
        self,
        frames: Sequence[Frame],
        progress_callback: Optional[ProgressCallback] = None,
        diagnostics_observer: Optional[DiagnosticsObserver] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Trajectory:
        """프레임들을 병렬 처리하고 프레임 번호순으로 정렬된 궤적 반환

        진행률은 약 10회로 나눈 청크 단위로 보고되고, 취소는 청크 사이에서 확인된다.
        진단 옵저버는 워커 스레드에서 순서 보장 없이 호출된다.
        """
        total = len(frames)
        if total == 0:
            return Trajectory()

        chunk_size = max(1, total // PROGRESS_UPDATES)
        points: List[GPSPoint] = []

        self.logger.info(f"{total}개 프레임 OCR 시작 (워커 {self.max_workers}개)")
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for chunk_start in range(0, total, chunk_size):
                if cancel_event is not None and cancel_event.is_set():
                    raise ExtractionCancelled(
                        f"OCR 취소됨 ({chunk_start}/{total} 프레임 처리)"
                    )

                chunk = frames[chunk_start : chunk_start + chunk_size]
                futures = [
                    executor.submit(
                        self.extract_point, index, image, diagnostics_observer
                    )
                    for index, image in chunk
                ]
                for future in as_completed(futures):
                    points.append(future.result())

                if progress_callback is not None:
                    progress_callback(min(chunk_start + chunk_size, total) / total)

        points.sort(key=lambda p: p.frame_number)
        valid = sum(1 for p in points if p.is_valid)
        self.logger.info(f"OCR 완료: 유효 좌표 {valid}/{total}개")
        return Trajectory(points=points)

    def extract_point(
        self,
        frame_number: int,
        image: np.ndarray,
        diagnostics_observer: Optional[DiagnosticsObserver] = None,
    ) -> GPSPoint:
        """단일 프레임에서 좌표 추출. 실패는 무효 좌표점으로 표현된다."""
        if is_empty_image(image):
            return GPSPoint(frame_number=frame_number)

        result = self.cropper.crop(image, self.region)
        if result is None:
            return GPSPoint(frame_number=frame_number)

        if diagnostics_observer is not None:
            self._notify(diagnostics_observer, image, result.display_image)

        try:
            candidates = self.recognizer.recognize(
                result.ocr_image, self.language, self.accuracy
            )
        except RecognitionError as e:
            self.logger.debug(f"프레임 {frame_number} 텍스트 인식 실패: {str(e)}")
            candidates = []
        except Exception as e:
            self.logger.warning(f"프레임 {frame_number} 인식기 오류: {str(e)}")
            candidates = []

        coords = self.parser.parse_first(candidates)
        if coords is None:
            return GPSPoint(frame_number=frame_number)

        return GPSPoint(
            frame_number=frame_number,
            coordinate=Coordinate(latitude=coords[0], longitude=coords[1]),
            extraction_method=ExtractionMethod.OCR,
        )

    def _notify(
        self, observer: DiagnosticsObserver, original: np.ndarray, cropped: np.ndarray
    ) -> None:
        try:
            observer(original, self.region, cropped)
        except Exception as e:
            self.logger.warning(f"진단 옵저버 오류: {str(e)}")
