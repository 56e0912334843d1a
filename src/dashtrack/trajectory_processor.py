import logging
from typing import List

import numpy as np
from scipy.interpolate import interp1d

from .geo_calculator import haversine_distance
from .models import Coordinate, ExtractionMethod, GPSPoint, Trajectory

DEFAULT_SMOOTHING_WINDOW = 5
DEFAULT_MINIMUM_DISTANCE = 0.0001


class TrajectoryProcessor:
    """궤적의 결측 보간, 이동 평균 평활화, 거리 기반 단순화"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def process(
        self,
        trajectory: Trajectory,
        interpolate: bool = True,
        smooth: bool = False,
        smoothing_window: int = DEFAULT_SMOOTHING_WINDOW,
    ) -> Trajectory:
        """보간 후 (선택적으로) 평활화"""
        processed = trajectory
        if interpolate:
            processed = self.interpolate_missing_points(processed)
        if smooth:
            processed = self.smooth_points(processed, smoothing_window)
        return processed

    def interpolate_missing_points(self, trajectory: Trajectory) -> Trajectory:
        """유효 좌표 사이의 결측 구간을 프레임 비율로 선형 보간

        마지막 유효 좌표 이후의 결측은 그 좌표를 그대로 복사하고 (외삽 없음),
        첫 유효 좌표 이전의 결측은 무효로 남긴다.
        """
        points = trajectory.points
        valid = [p for p in points if p.is_valid]
        if not valid or len(valid) == len(points):
            return Trajectory(points=list(points))

        first_frame = valid[0].frame_number
        frames = np.array([p.frame_number for p in valid], dtype=float)
        lat_at = self._interpolate_linear(frames, np.array([p.latitude for p in valid]))
        lon_at = self._interpolate_linear(frames, np.array([p.longitude for p in valid]))

        result: List[GPSPoint] = []
        filled = 0
        for point in points:
            if point.is_valid or point.frame_number < first_frame:
                result.append(point)
                continue

            result.append(
                GPSPoint(
                    frame_number=point.frame_number,
                    coordinate=Coordinate(
                        latitude=float(lat_at(point.frame_number)),
                        longitude=float(lon_at(point.frame_number)),
                    ),
                    timestamp=point.timestamp,
                    extraction_method=ExtractionMethod.INTERPOLATION,
                )
            )
            filled += 1

        self.logger.debug(f"{filled}개 좌표 보간")
        return Trajectory(points=result)

    @staticmethod
    def _interpolate_linear(x: np.ndarray, y: np.ndarray):
        """선형 보간 함수. 범위 밖은 양 끝값을 유지한다."""
        if len(x) == 1:
            return lambda _: y[0]
        return interp1d(x, y, kind="linear", bounds_error=False, fill_value=(y[0], y[-1]))

    def smooth_points(self, trajectory: Trajectory, window_size: int) -> Trajectory:
        """중심 이동 평균. 창 안의 유효 좌표가 2개 이상일 때만 대체한다."""
        points = trajectory.points
        if window_size <= 1 or len(points) <= 1:
            return trajectory

        half_window = window_size // 2
        valid_mask = np.array([p.is_valid for p in points])
        lats = np.array([p.latitude if p.is_valid else np.nan for p in points], dtype=float)
        lons = np.array([p.longitude if p.is_valid else np.nan for p in points], dtype=float)

        smoothed: List[GPSPoint] = []
        for i, point in enumerate(points):
            if not point.is_valid:
                smoothed.append(point)
                continue

            start = max(0, i - half_window)
            end = min(len(points) - 1, i + half_window) + 1
            window_mask = valid_mask[start:end]
            if window_mask.sum() < 2:
                smoothed.append(point)
                continue

            smoothed.append(
                GPSPoint(
                    frame_number=point.frame_number,
                    coordinate=Coordinate(
                        latitude=float(lats[start:end][window_mask].mean()),
                        longitude=float(lons[start:end][window_mask].mean()),
                    ),
                    timestamp=point.timestamp,
                    extraction_method=ExtractionMethod.SMOOTHING,
                )
            )

        return Trajectory(points=smoothed)

    def simplify_route(
        self, trajectory: Trajectory, minimum_distance: float = DEFAULT_MINIMUM_DISTANCE
    ) -> Trajectory:
        """마지막으로 남긴 좌표에서 minimum_distance(미터) 이상 떨어진 좌표만 남긴다

        처음과 마지막 좌표, 그리고 결측 정보를 보존하기 위해 무효 좌표는 항상 남긴다.
        """
        points = trajectory.points
        if len(points) <= 2:
            return Trajectory(points=list(points))

        simplified = [points[0]]
        # 거리 기준점: 마지막으로 남긴 유효 좌표
        anchor = points[0] if points[0].is_valid else None
        for current in points[1:-1]:
            if not current.is_valid:
                simplified.append(current)
                continue
            if anchor is not None:
                distance = haversine_distance(
                    anchor.latitude, anchor.longitude, current.latitude, current.longitude
                )
                if distance < minimum_distance:
                    continue

            simplified.append(current)
            anchor = current

        simplified.append(points[-1])
        self.logger.debug(f"경로 단순화: {len(points)} -> {len(simplified)}개")
        return Trajectory(points=simplified)

    @staticmethod
    def validate_route(trajectory: Trajectory) -> Trajectory:
        """유효 좌표만 남긴 궤적"""
        return Trajectory(points=trajectory.valid_points)
