import logging
from pathlib import Path
from typing import Optional, Sequence

from .errors import ExportWriteError
from .implementations.result_writer import CSVRouteWriter, GeoJSONRouteWriter
from .interfaces import IRouteWriter
from .models import VideoItem


class RouteExporter:
    """GeoJSON 과 CSV 를 함께 내보낸다"""

    def __init__(
        self,
        geojson_writer: Optional[IRouteWriter] = None,
        csv_writer: Optional[IRouteWriter] = None,
    ):
        self.geojson_writer = geojson_writer or GeoJSONRouteWriter()
        self.csv_writer = csv_writer or CSVRouteWriter()
        self.logger = logging.getLogger(__name__)

    def export_geojson(self, video_items: Sequence[VideoItem], output_path: str) -> None:
        self.geojson_writer.save(video_items, output_path)

    def export_csv(self, video_items: Sequence[VideoItem], output_path: str) -> None:
        self.csv_writer.save(video_items, output_path)

    def export_all(
        self,
        video_items: Sequence[VideoItem],
        directory: str,
        base_name: str = "routes",
    ) -> None:
        """디렉터리에 <base_name>.geojson 과 <base_name>.csv 를 쓴다"""
        output_dir = Path(directory)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportWriteError(f"Failed to create export directory: {str(e)}") from e

        self.export_geojson(video_items, str(output_dir / f"{base_name}.geojson"))
        self.export_csv(video_items, str(output_dir / f"{base_name}.csv"))

    def export(self, video_items: Sequence[VideoItem], file_path: str) -> None:
        """선택한 파일 경로의 디렉터리와 이름을 기준으로 GPS 데이터가 있는 비디오만 내보낸다

        Raises:
            ExportWriteError: GPS 데이터가 있는 비디오가 하나도 없는 경우
        """
        processed = [item for item in video_items if item.has_gps_data]
        if not processed:
            self.logger.error("내보낼 GPS 데이터가 없습니다")
            raise ExportWriteError("No processed videos with GPS data to export")

        path = Path(file_path)
        self.export_all(processed, str(path.parent), base_name=path.stem)
