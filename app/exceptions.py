# app/exceptions.py
"""
서비스 공통 예외 - main.py의 핸들러가 상태코드/응답 형식으로 변환
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    status_code = 404


class ValidationError(ServiceError):
    status_code = 400


class ForbiddenError(ServiceError):
    status_code = 403


class AttachmentConflictError(ServiceError):
    status_code = 409


class AttachmentIOError(ServiceError):
    status_code = 500


class MailNotConfiguredError(ServiceError):
    status_code = 503
