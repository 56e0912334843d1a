import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import InvalidStatusTransition


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Coordinate(BaseModel):
    """위도/경도 쌍. 범위를 벗어난 판독값도 표현할 수 있도록 제약을 두지 않는다."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    @property
    def in_range(self) -> bool:
        return -90 <= self.latitude <= 90 and -180 <= self.longitude <= 180


class ExtractionMethod(str, Enum):
    """좌표를 얻은 방법"""

    OCR = "OCR"
    INTERPOLATION = "Interpolation"
    SMOOTHING = "Smoothing"


class GPSPoint(BaseModel):
    """샘플링된 프레임 하나의 GPS 좌표점

    ``is_valid`` 는 저장되는 값이 아니라 좌표로부터 매번 계산된다.
    """

    model_config = ConfigDict(frozen=True)

    frame_number: int = Field(ge=0)
    coordinate: Optional[Coordinate] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    extraction_method: ExtractionMethod = ExtractionMethod.OCR

    @classmethod
    def from_values(
        cls,
        frame_number: int,
        latitude: Optional[float],
        longitude: Optional[float],
        timestamp: Optional[datetime] = None,
        extraction_method: ExtractionMethod = ExtractionMethod.OCR,
    ) -> "GPSPoint":
        """위도/경도 두 개의 선택값으로 좌표점 생성 (둘 다 있을 때만 좌표가 생긴다)"""
        coordinate = None
        if latitude is not None and longitude is not None:
            coordinate = Coordinate(latitude=latitude, longitude=longitude)
        return cls(
            frame_number=frame_number,
            coordinate=coordinate,
            timestamp=timestamp or _utcnow(),
            extraction_method=extraction_method,
        )

    @classmethod
    def interpolated(
        cls, frame_number: int, start: "GPSPoint", end: "GPSPoint"
    ) -> "GPSPoint":
        """두 앵커 사이를 프레임 비율로 선형 보간한 좌표점 생성"""
        if start.coordinate is None or end.coordinate is None:
            return cls(
                frame_number=frame_number,
                extraction_method=ExtractionMethod.INTERPOLATION,
            )

        t = (frame_number - start.frame_number) / (
            end.frame_number - start.frame_number
        )
        lat = start.latitude + (end.latitude - start.latitude) * t
        lon = start.longitude + (end.longitude - start.longitude) * t
        return cls(
            frame_number=frame_number,
            coordinate=Coordinate(latitude=lat, longitude=lon),
            extraction_method=ExtractionMethod.INTERPOLATION,
        )

    @property
    def latitude(self) -> Optional[float]:
        return self.coordinate.latitude if self.coordinate else None

    @property
    def longitude(self) -> Optional[float]:
        return self.coordinate.longitude if self.coordinate else None

    @property
    def is_valid(self) -> bool:
        return self.coordinate is not None and self.coordinate.in_range


class Trajectory(BaseModel):
    """프레임 번호 순으로 정렬된 단일 비디오의 좌표점 시퀀스"""

    points: List[GPSPoint] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_frame_order(self) -> "Trajectory":
        """프레임 번호가 중복 없이 증가하는지 검증"""
        for prev, curr in zip(self.points, self.points[1:]):
            if curr.frame_number <= prev.frame_number:
                raise ValueError(
                    "프레임 번호는 중복 없이 증가해야 합니다: "
                    f"{prev.frame_number} -> {curr.frame_number}"
                )
        return self

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[GPSPoint]:  # type: ignore[override]
        return iter(self.points)

    def __getitem__(self, index: int) -> GPSPoint:
        return self.points[index]

    @property
    def frame_numbers(self) -> List[int]:
        return [p.frame_number for p in self.points]

    @property
    def valid_points(self) -> List[GPSPoint]:
        return [p for p in self.points if p.is_valid]

    @property
    def valid_count(self) -> int:
        return sum(1 for p in self.points if p.is_valid)

    @property
    def has_valid_points(self) -> bool:
        return any(p.is_valid for p in self.points)


class ExtractionStatus(str, Enum):
    """비디오별 GPS 추출 상태"""

    PENDING = "Pending"
    EXTRACTING = "Extracting..."
    COMPLETED = "Completed"
    FAILED = "Failed - No GPS Data"
    ERROR = "Error"


class VideoItem(BaseModel):
    """GPS 추출 대상 비디오와 그 궤적"""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    source: str
    trajectory: Trajectory = Field(default_factory=Trajectory)
    status: ExtractionStatus = ExtractionStatus.PENDING
    error_message: Optional[str] = None

    @property
    def filename(self) -> str:
        return Path(self.source).name

    @property
    def total_frames(self) -> int:
        return len(self.trajectory)

    @property
    def has_gps_data(self) -> bool:
        return self.trajectory.has_valid_points

    def start_extraction(self) -> None:
        if self.status != ExtractionStatus.PENDING:
            raise InvalidStatusTransition(
                f"{self.filename}: {self.status.value} 상태에서 추출을 시작할 수 없습니다"
            )
        self.status = ExtractionStatus.EXTRACTING

    def complete(self, trajectory: Trajectory) -> None:
        """처리된 궤적을 저장하고 유효 좌표 유무에 따라 Completed/Failed 로 전이"""
        self._require_extracting()
        self.trajectory = trajectory
        self.status = (
            ExtractionStatus.COMPLETED
            if trajectory.has_valid_points
            else ExtractionStatus.FAILED
        )

    def fail_with_error(self, message: str) -> None:
        """추출 자체가 실패한 경우. 궤적은 버린다."""
        self._require_extracting()
        self.trajectory = Trajectory()
        self.error_message = message
        self.status = ExtractionStatus.ERROR

    def _require_extracting(self) -> None:
        if self.status != ExtractionStatus.EXTRACTING:
            raise InvalidStatusTransition(
                f"{self.filename}: 추출 중이 아닌 상태({self.status.value})입니다"
            )


class OCRRegion(BaseModel):
    """정규화된 OCR 관심 영역 (좌상단 원점, 0.0 ~ 1.0)"""

    model_config = ConfigDict(frozen=True)

    x: float = Field(ge=0, le=1)
    y: float = Field(ge=0, le=1)
    width: float = Field(ge=0, le=1)
    height: float = Field(ge=0, le=1)

    @classmethod
    def from_preset(cls, name: str) -> "OCRRegion":
        try:
            return PRESET_REGIONS[name]
        except KeyError:
            raise ValueError(
                f"알 수 없는 영역 프리셋: {name} (가능한 값: {sorted(PRESET_REGIONS)})"
            )


FULL_FRAME = OCRRegion(x=0.0, y=0.0, width=1.0, height=1.0)
TOP_LEFT = OCRRegion(x=0.0, y=0.0, width=0.4, height=0.4)
TOP_RIGHT = OCRRegion(x=0.6, y=0.0, width=0.4, height=0.4)
BOTTOM_LEFT = OCRRegion(x=0.0, y=0.6, width=0.4, height=0.4)
BOTTOM_RIGHT = OCRRegion(x=0.6, y=0.6, width=0.4, height=0.4)
# 1920x1080 기준 좌상단 (653, 1030), 크기 390x50 의 좌표 오버레이
CUSTOM_GPS_REGION = OCRRegion(
    x=653.0 / 1920.0,
    y=1030.0 / 1080.0,
    width=390.0 / 1920.0,
    height=50.0 / 1080.0,
)

PRESET_REGIONS: Dict[str, OCRRegion] = {
    "full_frame": FULL_FRAME,
    "top_left": TOP_LEFT,
    "top_right": TOP_RIGHT,
    "bottom_left": BOTTOM_LEFT,
    "bottom_right": BOTTOM_RIGHT,
    "custom_gps": CUSTOM_GPS_REGION,
}


class MapRegion(BaseModel):
    """경로 전체를 담는 지도 표시 영역"""

    center: Coordinate
    latitude_span: float = Field(gt=0)
    longitude_span: float = Field(gt=0)
