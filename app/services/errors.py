"""
Service-level error taxonomy.

Services raise these; ``main.create_app`` registers a single exception
handler that turns them into a JSON body ``{"detail": ..., "error": ...}``
with the status code carried by the class.
"""

from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_response_content(self) -> dict:
        content = {"detail": self.message}
        if self.cause is not None:
            content["error"] = str(self.cause)
        return content


class UnauthorizedError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidOperationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnsupportedMediaTypeError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class UploadFailedError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class AnalysisFailedError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ServiceUnavailableError(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class PayloadTooLargeError(ServiceError):
    status_code = status.HTTP_413_CONTENT_TOO_LARGE
