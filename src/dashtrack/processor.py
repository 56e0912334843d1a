import logging
import threading
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .errors import AssetError, ExtractionCancelled
from .exporter import RouteExporter
from .extraction import DiagnosticsObserver, ExtractionCoordinator
from .frame_sampler import FrameObserver, FrameSampler
from .interfaces import IVideoSource
from .models import ExtractionStatus, VideoItem
from .trajectory_processor import DEFAULT_SMOOTHING_WINDOW, TrajectoryProcessor

VideoSourceFactory = Callable[[str], IVideoSource]
# (전체 진행률, 처리 중인 파일 이름)
BatchProgressCallback = Callable[[float, str], None]

SUPPORTED_EXTENSIONS = (".mp4",)


def collect_videos(paths: Iterable[str]) -> List[VideoItem]:
    """지원하는 확장자의 비디오 경로만 VideoItem 으로 만든다"""
    return [
        VideoItem(source=str(path))
        for path in paths
        if Path(path).suffix.lower() in SUPPORTED_EXTENSIONS
    ]


class RouteVideoProcessor:
    """대시캠 비디오를 프레임 샘플링, OCR, 궤적 보정을 거쳐 GPS 경로로 처리합니다."""

    def __init__(
        self,
        video_source_factory: VideoSourceFactory,
        sampler: FrameSampler,
        coordinator: ExtractionCoordinator,
        trajectory_processor: Optional[TrajectoryProcessor] = None,
        exporter: Optional[RouteExporter] = None,
        interpolate: bool = True,
        smooth: bool = False,
        smoothing_window: int = DEFAULT_SMOOTHING_WINDOW,
    ):
        """
        Args:
            video_source_factory: 비디오 경로로 IVideoSource 를 만드는 함수
            sampler: 프레임 샘플러
            coordinator: OCR 추출 코디네이터
            trajectory_processor: 보간/평활화 처리기
            exporter: GeoJSON/CSV 내보내기
            interpolate: 결측 보간 여부
            smooth: 평활화 여부
            smoothing_window: 평활화 창 크기 (홀수 권장, 보통 3 ~ 15)
        """
        self.video_source_factory = video_source_factory
        self.sampler = sampler
        self.coordinator = coordinator
        self.trajectory_processor = trajectory_processor or TrajectoryProcessor()
        self.exporter = exporter or RouteExporter()
        self.interpolate = interpolate
        self.smooth = smooth
        self.smoothing_window = smoothing_window
        self.logger = logging.getLogger(__name__)

    def process_videos(
        self,
        video_items: List[VideoItem],
        progress_callback: Optional[BatchProgressCallback] = None,
        diagnostics_observer: Optional[DiagnosticsObserver] = None,
        cancel_event: Optional[threading.Event] = None,
        frame_observer: Optional[FrameObserver] = None,
    ) -> List[VideoItem]:
        """여러 비디오를 순서대로 처리합니다. 한 비디오의 실패는 다른 비디오에 영향을 주지 않습니다."""
        total = len(video_items)
        for index, item in enumerate(video_items):
            if item.status != ExtractionStatus.PENDING:
                self.logger.info(f"{item.filename}: 이미 처리됨 ({item.status.value})")
                continue

            def report(fraction: float, _index=index, _item=item) -> None:
                if progress_callback is not None:
                    progress_callback((_index + fraction) / total, _item.filename)

            self.process_video(
                item, report, diagnostics_observer, cancel_event, frame_observer
            )

        if progress_callback is not None and total:
            progress_callback(1.0, "")
        return video_items

    def process_video(
        self,
        item: VideoItem,
        progress_callback: Optional[Callable[[float], None]] = None,
        diagnostics_observer: Optional[DiagnosticsObserver] = None,
        cancel_event: Optional[threading.Event] = None,
        frame_observer: Optional[FrameObserver] = None,
    ) -> VideoItem:
        """단일 비디오에서 GPS 궤적을 추출합니다.

        프레임 샘플링이 진행률의 앞 절반, OCR 이 뒤 절반을 차지합니다.
        frame_observer 는 샘플링 중 N 프레임마다 (진행률, 이미지) 로 호출됩니다.

        Raises:
            ExtractionCancelled: 취소된 경우. 비디오는 Error 상태가 되고 부분 결과는 버려집니다.
        """
        item.start_extraction()
        self.logger.info(f"{item.filename} 프레임 추출 시작")

        def sampling_progress(fraction: float) -> None:
            if progress_callback is not None:
                progress_callback(fraction * 0.5)

        def ocr_progress(fraction: float) -> None:
            if progress_callback is not None:
                progress_callback(0.5 + fraction * 0.5)

        try:
            with self.video_source_factory(item.source) as source:
                frames = self.sampler.collect(
                    source, sampling_progress, frame_observer, cancel_event
                )
            self.logger.info(f"{item.filename}: {len(frames)}개 프레임 추출 완료")

            raw = self.coordinator.extract_points(
                frames, ocr_progress, diagnostics_observer, cancel_event
            )
            processed = self.trajectory_processor.process(
                raw,
                interpolate=self.interpolate,
                smooth=self.smooth,
                smoothing_window=self.smoothing_window,
            )
        except ExtractionCancelled as e:
            self.logger.warning(f"{item.filename} 처리 취소: {str(e)}")
            item.fail_with_error(f"Cancelled: {str(e)}")
            raise
        except (AssetError, OSError) as e:
            self.logger.error(f"{item.filename} 처리 실패: {str(e)}")
            item.fail_with_error(f"Error processing {item.filename}: {str(e)}")
            return item
        except Exception as e:
            self.logger.error(f"{item.filename} 처리 중 예기치 않은 오류: {str(e)}")
            item.fail_with_error(f"Error processing {item.filename}: {str(e)}")
            return item

        item.complete(processed)
        if item.has_gps_data:
            self.logger.info(
                f"{item.filename}: 유효 좌표 {item.trajectory.valid_count}/{item.total_frames}개"
            )
        else:
            item.error_message = f"No GPS data found in {item.filename}"
            self.logger.warning(item.error_message)
        return item

    def reprocess(
        self, item: VideoItem, smooth: bool, smoothing_window: Optional[int] = None
    ) -> VideoItem:
        """평활화 설정을 바꿔 이미 추출된 궤적을 다시 처리합니다."""
        if not item.has_gps_data:
            return item

        item.trajectory = self.trajectory_processor.process(
            item.trajectory,
            interpolate=self.interpolate,
            smooth=smooth,
            smoothing_window=smoothing_window or self.smoothing_window,
        )
        return item

    def save_results(self, video_items: List[VideoItem], output_path: str) -> None:
        """처리 결과를 GeoJSON/CSV 로 저장합니다."""
        try:
            self.exporter.export(video_items, output_path)
            self.logger.info(f"결과가 {Path(output_path).parent}에 저장되었습니다.")
        except Exception as e:
            self.logger.error(f"결과 저장 실패: {str(e)}")
            raise
