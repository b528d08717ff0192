"""도메인 예외."""


class ConfigurationError(ValueError):
    """잘못된 설정 (예: max_attempts <= 0). 재시도 없이 즉시 보고."""


class HTTPError(Exception):
    """HTTP 상태 코드를 가진 요청 경로 오류.

    에러 핸들러가 status_code를 응답 코드로 사용 (기본 500).
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
