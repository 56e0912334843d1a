import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from . import collect_videos, create_default_config, create_processor, setup_logging
from .errors import ExportError
from .models import PRESET_REGIONS
from .trajectory_processor import TrajectoryProcessor


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dashtrack",
        description="대시캠 비디오의 좌표 오버레이를 읽어 GeoJSON/CSV 경로로 내보냅니다",
    )
    parser.add_argument("videos", nargs="+", help="처리할 .mp4 비디오 파일")
    parser.add_argument("--output", "-o", help="출력 디렉터리")
    parser.add_argument("--name", help="출력 파일 기본 이름")
    parser.add_argument("--region", choices=sorted(PRESET_REGIONS), help="OCR 영역 프리셋")
    parser.add_argument("--interval", type=float, help="샘플링 간격 (초)")
    parser.add_argument("--workers", type=int, help="OCR 워커 수")
    parser.add_argument("--smooth", action="store_true", help="이동 평균 평활화 사용")
    parser.add_argument("--window", type=int, help="평활화 창 크기")
    parser.add_argument("--simplify", type=float, help="경로 단순화 최소 거리 (미터)")
    parser.add_argument("--tesseract-cmd", help="tesseract 실행 파일 경로")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> dict:
    config = create_default_config()
    if args.output:
        config["paths"]["output"] = args.output
    if args.name:
        config["paths"]["base_name"] = args.name
    if args.region:
        config["ocr"]["region"] = args.region
    if args.interval:
        config["sampling"]["interval_seconds"] = args.interval
    if args.workers:
        config["ocr"]["max_workers"] = args.workers
    if args.tesseract_cmd:
        config["ocr"]["tesseract_cmd"] = args.tesseract_cmd
    if args.smooth:
        config["trajectory"]["smooth"] = True
    if args.window:
        config["trajectory"]["smoothing_window"] = args.window
    if args.simplify is not None:
        config["trajectory"]["simplify_distance"] = args.simplify
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """메인 실행 함수"""
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    logger = logging.getLogger("dashtrack")

    config = build_config(args)
    items = collect_videos(args.videos)
    if not items:
        logger.error("처리할 .mp4 비디오가 없습니다")
        return 1

    processor = create_processor(config)
    logger.info(f"{len(items)}개의 비디오를 처리합니다...")

    with tqdm(total=100, unit="%") as bar:

        def report(progress: float, filename: str) -> None:
            bar.set_description(filename or "done")
            bar.n = round(progress * 100, 1)
            bar.refresh()

        processor.process_videos(items, progress_callback=report)

    simplify_distance = config["trajectory"]["simplify_distance"]
    if simplify_distance is not None:
        trajectory_processor = TrajectoryProcessor()
        for item in items:
            if item.has_gps_data:
                item.trajectory = trajectory_processor.simplify_route(
                    item.trajectory, simplify_distance
                )

    for item in items:
        logger.info(
            f"{item.filename}: {item.status.value} "
            f"({item.trajectory.valid_count}/{item.total_frames} 유효)"
        )

    output_path = Path(config["paths"]["output"]) / f"{config['paths']['base_name']}.geojson"
    try:
        processor.save_results(items, str(output_path))
    except ExportError as e:
        logger.error(f"처리 실패: {str(e)}")
        return 1

    logger.info("처리 성공")
    return 0


if __name__ == "__main__":
    sys.exit(main())
