import csv
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Sequence

import pandas as pd

from ..errors import ExportEncodingError, ExportWriteError
from ..interfaces import IRouteWriter
from ..models import VideoItem

CSV_COLUMNS = [
    "filename",
    "frame_number",
    "latitude",
    "longitude",
    "extraction_status",
    "extraction_method",
    "timestamp",
]


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def atomic_write(output_path: str, content: str, encoding: str = "utf-8") -> None:
    """같은 디렉터리의 임시 파일에 쓴 뒤 교체. 쓰다 만 파일은 목적지에 보이지 않는다."""
    try:
        data = content.encode(encoding)
    except UnicodeEncodeError as e:
        raise ExportEncodingError(f"Failed to encode export data: {str(e)}") from e

    path = Path(output_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    except OSError as e:
        raise ExportWriteError(f"Failed to write export file {output_path}: {str(e)}") from e


class GeoJSONRouteWriter(IRouteWriter):
    """유효 좌표가 있는 비디오마다 LineString Feature 하나를 쓰는 writer"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def build_collection(self, video_items: Sequence[VideoItem]) -> Dict:
        features = []
        extraction_date = _iso_now()
        for item in video_items:
            valid_points = item.trajectory.valid_points
            if not valid_points:
                continue

            features.append(
                {
                    "type": "Feature",
                    "properties": {
                        "name": item.filename,
                        "extractionDate": extraction_date,
                        "totalFrames": item.total_frames,
                        "validFrames": len(valid_points),
                    },
                    "geometry": {
                        "type": "LineString",
                        # GeoJSON 좌표 순서는 [경도, 위도]
                        "coordinates": [[p.longitude, p.latitude] for p in valid_points],
                    },
                }
            )
        return {"type": "FeatureCollection", "features": features}

    def save(self, video_items: Sequence[VideoItem], output_path: str) -> None:
        try:
            content = json.dumps(
                self.build_collection(video_items),
                ensure_ascii=False,
                indent=2,
                sort_keys=True,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            self.logger.error(f"GeoJSON 인코딩 실패: {str(e)}")
            raise ExportEncodingError(f"Failed to encode GeoJSON: {str(e)}") from e

        atomic_write(output_path, content)
        self.logger.info(f"GeoJSON 이 {output_path}에 저장되었습니다.")


class CSVRouteWriter(IRouteWriter):
    """샘플링된 프레임마다 한 행을 쓰는 writer"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def build_frame(self, video_items: Sequence[VideoItem]) -> pd.DataFrame:
        rows: List[Dict] = []
        timestamp = _iso_now()
        for item in video_items:
            if len(item.trajectory) == 0:
                rows.append(
                    {
                        "filename": item.filename,
                        "frame_number": 0,
                        "latitude": None,
                        "longitude": None,
                        "extraction_status": item.status.value,
                        "extraction_method": "",
                        "timestamp": timestamp,
                    }
                )
                continue

            for point in item.trajectory:
                rows.append(
                    {
                        "filename": item.filename,
                        "frame_number": point.frame_number,
                        "latitude": point.latitude,
                        "longitude": point.longitude,
                        "extraction_status": "Valid" if point.is_valid else "Invalid",
                        "extraction_method": point.extraction_method.value,
                        "timestamp": timestamp,
                    }
                )

        df = pd.DataFrame(rows, columns=CSV_COLUMNS)
        df["frame_number"] = df["frame_number"].astype("int64")
        df["latitude"] = df["latitude"].astype("float64")
        df["longitude"] = df["longitude"].astype("float64")
        return df

    def save(self, video_items: Sequence[VideoItem], output_path: str) -> None:
        # 문자열 필드는 따옴표로 감싸고 내부 따옴표는 두 번 써서 이스케이프
        body = self.build_frame(video_items).to_csv(
            index=False,
            header=False,
            quoting=csv.QUOTE_NONNUMERIC,
            doublequote=True,
            na_rep="",
            lineterminator="\n",
        )
        atomic_write(output_path, ",".join(CSV_COLUMNS) + "\n" + body)
        self.logger.info(f"CSV 가 {output_path}에 저장되었습니다.")
