# services/errors.py
"""
서비스 전역 예외 계층. 각 예외는 HTTP 경계에서 응답 상태 코드로 변환된다.
"""


class ServiceError(Exception):
    status_code = 500


class RequestError(ServiceError):
    """요청 필드 누락/형식 오류 (부수효과 발생 전에 검출)"""
    status_code = 400


class EncodingError(ServiceError):
    """QR 이미지 렌더링 실패"""


class SendError(ServiceError):
    """SMTP 전송/인증/수신자 거부"""


class SubmissionError(ServiceError):
    """트랜잭션 제출 실패, 리버트, 수수료 부족 등"""


class ConfirmationTimeoutError(SubmissionError):
    pass
