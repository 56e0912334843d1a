import logging
import re
from typing import Iterable, List, Optional, Pattern, Tuple

# OCR 오판독으로 생긴 0 근처 값을 걸러내는 경험적 임계값.
# 적도/본초 자오선 부근의 실제 좌표도 함께 걸러진다.
NEAR_ZERO_THRESHOLD = 0.0001

PLAIN_PATTERN = re.compile(r"(-?\d+\.?\d*)\s*,\s*(-?\d+\.?\d*)")
DIRECTIONAL_PATTERN = re.compile(
    r"(\d+\.?\d*)\s*°?\s*([NS])\s*,\s*(\d+\.?\d*)\s*°?\s*([EW])", re.IGNORECASE
)
LABELED_PATTERN = re.compile(
    r"(?:lat|latitude)[:\s]+(-?\d+\.?\d*).*?(?:lon|lng|longitude)[:\s]+(-?\d+\.?\d*)",
    re.IGNORECASE,
)


def is_valid_coordinate(
    latitude: float, longitude: float, near_zero_threshold: float = NEAR_ZERO_THRESHOLD
) -> bool:
    return (
        -90 <= latitude <= 90
        and -180 <= longitude <= 180
        and abs(latitude) > near_zero_threshold
        and abs(longitude) > near_zero_threshold
    )


class CoordinateParser:
    """인식된 텍스트에서 (위도, 경도)를 추출

    지원 형식 (우선순위 순):
        - "37.7749, -122.4194"
        - "37.7749°N, 122.4194°W" / "37.7749 N, 122.4194 W"
        - "Lat: 37.7749 Lon: -122.4194"
    """

    def __init__(self, near_zero_threshold: float = NEAR_ZERO_THRESHOLD):
        self.near_zero_threshold = near_zero_threshold
        self.logger = logging.getLogger(__name__)

    def parse(self, text: str) -> Optional[Tuple[float, float]]:
        if not text:
            return None

        for grammar in (self._parse_plain, self._parse_directional, self._parse_labeled):
            coords = grammar(text)
            if coords is not None and self._accept(*coords):
                return coords
        return None

    def parse_first(self, candidates: Iterable[str]) -> Optional[Tuple[float, float]]:
        """순위순 후보 중 처음으로 파싱에 성공한 좌표 반환"""
        for text in candidates:
            coords = self.parse(text)
            if coords is not None:
                return coords
        return None

    def _accept(self, latitude: float, longitude: float) -> bool:
        return is_valid_coordinate(latitude, longitude, self.near_zero_threshold)

    @staticmethod
    def _parse_plain(text: str) -> Optional[Tuple[float, float]]:
        return _search_pair(PLAIN_PATTERN, text)

    @staticmethod
    def _parse_directional(text: str) -> Optional[Tuple[float, float]]:
        match = DIRECTIONAL_PATTERN.search(text)
        if not match:
            return None
        lat = float(match.group(1))
        lon = float(match.group(3))
        if match.group(2).upper() == "S":
            lat = -lat
        if match.group(4).upper() == "W":
            lon = -lon
        return lat, lon

    @staticmethod
    def _parse_labeled(text: str) -> Optional[Tuple[float, float]]:
        return _search_pair(LABELED_PATTERN, text)


def _search_pair(pattern: Pattern, text: str) -> Optional[Tuple[float, float]]:
    match = pattern.search(text)
    if not match:
        return None
    return float(match.group(1)), float(match.group(2))


_default_parser = CoordinateParser()


def parse_coordinates(text: str) -> Optional[Tuple[float, float]]:
    """기본 임계값으로 텍스트 하나를 파싱"""
    return _default_parser.parse(text)


def parse_first(candidates: List[str]) -> Optional[Tuple[float, float]]:
    return _default_parser.parse_first(candidates)
