import math
from typing import Optional

from .models import Coordinate, Trajectory


def index_for_ratio(ratio: float, count: int) -> int:
    """재생 비율을 [0, count - 1] 범위의 인덱스로 변환 (반올림)"""
    if count <= 0:
        raise ValueError("count 는 1 이상이어야 합니다")
    index = int(math.floor(ratio * (count - 1) + 0.5))
    return min(max(index, 0), count - 1)


class PlaybackPositionMapper:
    """비디오 재생 위치를 궤적 위의 좌표로 변환

    샘플링 간격이 일정하다는 가정 아래 재생 비율에 비례하는 인덱스를 사용한다.
    타임스탬프 검색이 아니므로 간격이 바뀌면 실제 경과 시간과 어긋난다.
    """

    def position_at(
        self, current_time: float, duration: float, trajectory: Trajectory
    ) -> Optional[Coordinate]:
        if duration <= 0 or len(trajectory) == 0:
            return None

        point = trajectory[index_for_ratio(current_time / duration, len(trajectory))]
        return point.coordinate if point.is_valid else None

    def route_position(
        self, frame_index: int, total_frames: int, trajectory: Trajectory
    ) -> Optional[Coordinate]:
        """프레임 인덱스를 유효 좌표만으로 이루어진 경로 위치로 변환"""
        route = [p.coordinate for p in trajectory.valid_points]
        if not route or total_frames <= 0:
            return None

        progress = frame_index / max(total_frames - 1, 1)
        return route[index_for_ratio(progress, len(route))]
