import logging
from typing import List, Optional

import cv2
import numpy as np
import pytesseract
from PIL import Image

from ..errors import RecognitionError
from ..interfaces import ITextRecognizer, RecognitionAccuracy

# 좌표 오버레이는 한 줄 또는 몇 줄짜리 블록이다
ACCURATE_CONFIG = r"--oem 1 --psm 6"
FAST_CONFIG = r"--oem 1 --psm 7"


class TesseractTextRecognizer(ITextRecognizer):
    """pytesseract 로 OCR 을 수행하고 줄 단위 후보를 순위순으로 반환

    accurate 모드는 Otsu 이진화 이미지와 회색조 이미지 두 번 인식하고,
    fast 모드는 회색조 이미지 한 번만 인식한다.
    """

    def __init__(self, tesseract_cmd: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def recognize(
        self,
        image: np.ndarray,
        language: str = "eng",
        accuracy: RecognitionAccuracy = RecognitionAccuracy.ACCURATE,
    ) -> List[str]:
        if image is None or image.size == 0:
            return []

        gray = self._to_gray(image)
        if accuracy == RecognitionAccuracy.ACCURATE:
            _, thresh = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
            passes = [(thresh, ACCURATE_CONFIG), (gray, ACCURATE_CONFIG)]
        else:
            passes = [(gray, FAST_CONFIG)]

        texts = []
        for pass_image, config in passes:
            try:
                texts.append(
                    pytesseract.image_to_string(
                        Image.fromarray(pass_image), lang=language, config=config
                    )
                )
            except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
                raise RecognitionError(f"OCR 실패: {str(e)}") from e

        return self._rank_candidates(texts)

    @staticmethod
    def _to_gray(image: np.ndarray) -> np.ndarray:
        if image.ndim == 2:
            return image
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

    @staticmethod
    def _rank_candidates(texts: List[str]) -> List[str]:
        """각 인식 결과의 줄을 순서대로, 이어서 전체 텍스트를 한 줄로 (중복 제거)"""
        candidates = []
        for text in texts:
            candidates.extend(line.strip() for line in text.splitlines())
        candidates.extend(" ".join(text.split()) for text in texts)

        ranked = []
        seen = set()
        for candidate in candidates:
            if candidate and candidate not in seen:
                seen.add(candidate)
                ranked.append(candidate)
        return ranked
