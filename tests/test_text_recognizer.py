"""Tests for the pytesseract-backed recognizer (tesseract itself is mocked)."""

from unittest.mock import patch

import numpy as np
import pytest
import pytesseract

from dashtrack.errors import RecognitionError
from dashtrack.implementations.text_recognizer import (
    ACCURATE_CONFIG,
    FAST_CONFIG,
    TesseractTextRecognizer,
)
from dashtrack.interfaces import RecognitionAccuracy

IMAGE_TO_STRING = "dashtrack.implementations.text_recognizer.pytesseract.image_to_string"


@pytest.fixture
def image():
    frame = np.zeros((20, 60, 3), dtype=np.uint8)
    frame[5:15, 10:50] = 255
    return frame


class TestRecognize:
    def test_accurate_runs_two_passes(self, image):
        with patch(IMAGE_TO_STRING, side_effect=["37.5, 127.0\n", "37.5, 127.0\nN 37.5\n"]) as ocr:
            candidates = TesseractTextRecognizer().recognize(
                image, "eng", RecognitionAccuracy.ACCURATE
            )

        assert ocr.call_count == 2
        for call in ocr.call_args_list:
            assert call.kwargs == {"lang": "eng", "config": ACCURATE_CONFIG}
        assert candidates == ["37.5, 127.0", "N 37.5", "37.5, 127.0 N 37.5"]

    def test_fast_runs_single_pass(self, image):
        with patch(IMAGE_TO_STRING, return_value="1.5, 2.5") as ocr:
            candidates = TesseractTextRecognizer().recognize(
                image, "kor", RecognitionAccuracy.FAST
            )

        ocr.assert_called_once()
        assert ocr.call_args.kwargs == {"lang": "kor", "config": FAST_CONFIG}
        assert candidates == ["1.5, 2.5"]

    def test_multiline_text_flattened_after_lines(self, image):
        with patch(IMAGE_TO_STRING, return_value="LAT 37.5\n  LON 127.0  \n\n"):
            candidates = TesseractTextRecognizer().recognize(image, accuracy=RecognitionAccuracy.FAST)
        assert candidates == ["LAT 37.5", "LON 127.0", "LAT 37.5 LON 127.0"]

    def test_grayscale_and_bgra_input(self, image):
        recognizer = TesseractTextRecognizer()
        with patch(IMAGE_TO_STRING, return_value="x") as ocr:
            recognizer.recognize(image[:, :, 0], accuracy=RecognitionAccuracy.FAST)
            bgra = np.dstack([image, np.full(image.shape[:2], 255, dtype=np.uint8)])
            recognizer.recognize(bgra, accuracy=RecognitionAccuracy.FAST)

        for call in ocr.call_args_list:
            assert call.args[0].mode == "L"

    def test_empty_image_skips_engine(self):
        with patch(IMAGE_TO_STRING) as ocr:
            assert TesseractTextRecognizer().recognize(np.zeros((0, 0, 3), dtype=np.uint8)) == []
        ocr.assert_not_called()

    def test_blank_output(self, image):
        with patch(IMAGE_TO_STRING, return_value="  \n"):
            assert TesseractTextRecognizer().recognize(image) == []

    @pytest.mark.parametrize(
        "error",
        [pytesseract.TesseractError(1, "bad"), pytesseract.TesseractNotFoundError()],
    )
    def test_engine_failure_becomes_recognition_error(self, image, error):
        with patch(IMAGE_TO_STRING, side_effect=error):
            with pytest.raises(RecognitionError):
                TesseractTextRecognizer().recognize(image)


def test_custom_tesseract_command():
    with patch.object(pytesseract.pytesseract, "tesseract_cmd", "tesseract"):
        TesseractTextRecognizer("/opt/bin/tesseract")
        assert pytesseract.pytesseract.tesseract_cmd == "/opt/bin/tesseract"


def test_default_tesseract_command_untouched():
    with patch.object(pytesseract.pytesseract, "tesseract_cmd", "tesseract"):
        TesseractTextRecognizer(None)
        assert pytesseract.pytesseract.tesseract_cmd == "tesseract"
