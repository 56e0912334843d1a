class DashtrackError(Exception):
    """dashtrack 최상위 예외"""


class AssetError(DashtrackError):
    """비디오 자산 단위의 치명적 오류 (해당 비디오의 추출만 중단)"""


class AssetUnreadable(AssetError):
    """비디오 파일을 읽을 수 없음"""


class NoVideoTrack(AssetError):
    """비디오 트랙이 없음"""


class FrameDecodeError(DashtrackError):
    """단일 프레임 디코딩 실패 (샘플러가 흡수)"""


class RecognitionError(DashtrackError):
    """텍스트 인식 실패 (텍스트 없음으로 처리)"""


class ExtractionCancelled(DashtrackError):
    """외부 요청으로 추출이 취소됨"""


class InvalidStatusTransition(DashtrackError):
    """허용되지 않는 추출 상태 전이"""


class ExportError(DashtrackError):
    """내보내기 실패. 목적지에는 아무것도 쓰이지 않는다."""


class ExportEncodingError(ExportError):
    def __init__(self, message: str = "Failed to encode export data"):
        super().__init__(message)


class ExportWriteError(ExportError):
    def __init__(self, message: str = "Failed to write export file"):
        super().__init__(message)
