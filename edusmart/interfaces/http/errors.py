from fastapi import HTTPException, status

from ...domain.errors import DomainError, ErrorKind

_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.UNVERIFIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INSUFFICIENT_TOKENS: status.HTTP_402_PAYMENT_REQUIRED,
}


def as_http(e: DomainError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_KIND[e.kind],
        detail={"code": e.code, "message": e.message},
    )
