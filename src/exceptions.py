"""Domain errors shared by the REST and GraphQL surfaces.

Each error is an ``HTTPException`` so services can raise it exactly where a
FastAPI service would raise one. The ``extensions`` property is picked up by
graphql-core when a resolver raises, so GraphQL clients see the same ``code``.
"""
from typing import Dict, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.http_status, detail=detail or self.message, headers=headers)

    @property
    def extensions(self) -> Dict[str, str]:
        return {"code": self.code}

    def __str__(self) -> str:
        return str(self.detail)


class Unauthenticated(AppError):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
    message = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentials(AppError):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"
    message = "Incorrect email or password"


class NotAuthorized(AppError):
    http_status = status.HTTP_403_FORBIDDEN
    code = "NOT_AUTHORIZED"
    message = "Not authorized to access this resource"


class NotFound(AppError):
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Resource not found"


class BadInput(AppError):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "BAD_USER_INPUT"
    message = "Invalid input"


class InvalidStatusTransition(BadInput):
    code = "INVALID_STATUS_TRANSITION"
    message = "Invalid status transition"


class DuplicateEmail(AppError):
    http_status = status.HTTP_409_CONFLICT
    code = "EMAIL_EXISTS"
    message = "Email already exists"


class SubscriptionExists(AppError):
    http_status = status.HTTP_409_CONFLICT
    code = "SUBSCRIPTION_EXISTS"
    message = "User already has an active subscription"


class UploadFailed(AppError):
    code = "UPLOAD_FAILED"
    message = "File upload failed"


class AnalysisFailed(AppError):
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "ANALYSIS_FAILED"
    message = "Analysis failed"


class InternalError(AppError):
    pass
