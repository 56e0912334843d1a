import logging
import os
from typing import Dict

from .coordinate_parser import CoordinateParser
from .exporter import RouteExporter
from .extraction import ExtractionCoordinator
from .frame_sampler import FrameSampler
from .implementations.text_recognizer import TesseractTextRecognizer
from .implementations.video_source import OpenCVVideoSource
from .interfaces import RecognitionAccuracy
from .models import OCRRegion
from .processor import RouteVideoProcessor, collect_videos
from .trajectory_processor import TrajectoryProcessor

__all__ = [
    "setup_logging",
    "create_default_config",
    "create_processor",
    "collect_videos",
    "RouteVideoProcessor",
]


def setup_logging(level: int = logging.INFO) -> None:
    """기본 로깅 설정"""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def create_default_config() -> Dict:
    """기본 처리 설정 생성"""
    return {
        "sampling": {
            "interval_seconds": 1 / 30,
            "observer_every": 10,
        },
        "ocr": {
            "region": "custom_gps",
            "language": "eng",
            "accuracy": "accurate",
            "max_workers": os.cpu_count() or 1,
            "near_zero_threshold": 0.0001,
            "tesseract_cmd": None,
        },
        "trajectory": {
            "interpolate": True,
            "smooth": False,
            "smoothing_window": 5,
            "simplify_distance": None,
        },
        "paths": {
            "output": "output",
            "base_name": "routes",
        },
    }


def create_processor(config: Dict) -> RouteVideoProcessor:
    """프로세서 인스턴스 생성

    Args:
        config: create_default_config() 형식의 처리 설정
    """
    ocr = config["ocr"]
    coordinator = ExtractionCoordinator(
        recognizer=TesseractTextRecognizer(ocr.get("tesseract_cmd")),
        region=OCRRegion.from_preset(ocr["region"]),
        parser=CoordinateParser(ocr["near_zero_threshold"]),
        max_workers=ocr["max_workers"],
        language=ocr["language"],
        accuracy=RecognitionAccuracy(ocr["accuracy"]),
    )
    sampler = FrameSampler(
        interval_seconds=config["sampling"]["interval_seconds"],
        observer_every=config["sampling"]["observer_every"],
    )
    trajectory = config["trajectory"]

    return RouteVideoProcessor(
        video_source_factory=OpenCVVideoSource,
        sampler=sampler,
        coordinator=coordinator,
        trajectory_processor=TrajectoryProcessor(),
        exporter=RouteExporter(),
        interpolate=trajectory["interpolate"],
        smooth=trajectory["smooth"],
        smoothing_window=trajectory["smoothing_window"],
    )
