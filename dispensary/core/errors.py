from __future__ import annotations

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Erro de domínio com código da taxonomia da API.

    Herda de HTTPException para que routers e apps de teste mínimos
    renderizem ``{"detail": {"code": ..., "message": ...}}`` sem handler extra.
    """

    code = "INTERNAL"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, headers: dict[str, str] | None = None) -> None:
        self.message = message
        super().__init__(
            status_code=type(self).status_code,
            detail={"code": self.code, "message": message},
            headers=headers,
        )


class UnauthorizedError(ServiceError):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(ServiceError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(ServiceError):
    code = "VALIDATION"
    status_code = 422


class InsufficientStockError(ServiceError):
    code = "INSUFFICIENT_STOCK"
    status_code = status.HTTP_400_BAD_REQUEST


class TooManyRequestsError(ServiceError):
    code = "TOO_MANY_REQUESTS"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


class InternalError(ServiceError):
    code = "INTERNAL"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
