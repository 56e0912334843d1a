import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .models import OCRRegion


class ImageOrigin(str, Enum):
    """이미지 버퍼의 행 원점"""

    TOP_LEFT = "top-left"
    BOTTOM_LEFT = "bottom-left"


@dataclass(frozen=True)
class PixelRect:
    """픽셀 단위 사각형"""

    x: int
    y: int
    width: int
    height: int


@dataclass
class CropResult:
    """OCR 용 크롭과 표시용 크롭 (서로 독립된 복사본)"""

    ocr_image: np.ndarray
    display_image: np.ndarray
    rect: PixelRect


def to_pixel_rect(region: OCRRegion, image_width: int, image_height: int) -> PixelRect:
    """정규화 영역을 좌상단 원점 픽셀 사각형으로 변환하고 이미지 안으로 제한"""
    x = int(region.x * image_width)
    y = int(region.y * image_height)
    width = int(region.width * image_width)
    height = int(region.height * image_height)

    x = max(0, min(x, image_width - 1))
    y = max(0, min(y, image_height - 1))
    width = max(1, min(width, image_width - x))
    height = max(1, min(height, image_height - y))
    return PixelRect(x=x, y=y, width=width, height=height)


def to_native_rect(rect: PixelRect, image_height: int, origin: ImageOrigin) -> PixelRect:
    """좌상단 기준 사각형을 버퍼 고유 원점 기준으로 변환

    좌하단 원점 버퍼에서 위에서부터 y 행, 높이 h 인 영역의 아래쪽 경계는
    ``image_height - y - h`` 이다.
    """
    if origin == ImageOrigin.TOP_LEFT:
        return rect

    bottom_y = image_height - rect.y - rect.height
    bottom_y = max(0, min(bottom_y, image_height - rect.height))
    return PixelRect(x=rect.x, y=bottom_y, width=rect.width, height=rect.height)


class RegionCropper:
    """OCR 관심 영역을 잘라 항상 좌상단 방향의 이미지를 돌려준다

    ``origin`` 은 입력 버퍼의 행 순서다. OpenCV/numpy 프레임은 좌상단 원점이고,
    좌하단 원점 버퍼(예: 일부 GPU 디코더 출력)는 행이 아래에서 위로 저장된다.
    """

    def __init__(self, origin: ImageOrigin = ImageOrigin.TOP_LEFT):
        self.origin = origin
        self.logger = logging.getLogger(__name__)

    def crop(self, image: np.ndarray, region: OCRRegion) -> Optional[CropResult]:
        if image is None or image.ndim < 2 or image.size == 0:
            return None

        height, width = image.shape[:2]
        rect = to_pixel_rect(region, width, height)
        native = to_native_rect(rect, height, self.origin)

        cropped = image[native.y : native.y + native.height, native.x : native.x + native.width]
        if self.origin == ImageOrigin.BOTTOM_LEFT:
            cropped = np.flipud(cropped)

        ocr_image = np.ascontiguousarray(cropped).copy()
        return CropResult(ocr_image=ocr_image, display_image=ocr_image.copy(), rect=rect)
