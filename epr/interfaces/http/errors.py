"""Translate domain errors into HTTP responses."""

import logging

from fastapi import HTTPException, status

from epr.domain.bills import AccessDeniedError, BillNotFoundError, DuplicateBillError, EncodingError
from epr.domain.common import EPRError, PersistenceError
from epr.domain.verifications import SettlementTimeoutError
from epr.domain.wallets import InsufficientBalanceError, InvalidAmountError, WalletNotFoundError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[EPRError], int]] = [
    (InsufficientBalanceError, status.HTTP_402_PAYMENT_REQUIRED),
    (AccessDeniedError, status.HTTP_403_FORBIDDEN),
    (BillNotFoundError, status.HTTP_404_NOT_FOUND),
    (WalletNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateBillError, status.HTTP_409_CONFLICT),
    (EncodingError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidAmountError, status.HTTP_400_BAD_REQUEST),
    (SettlementTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def to_http_exception(exc: EPRError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if status_code >= 500:
        logger.error("Request failed with %s: %s", type(exc).__name__, exc)
        detail = "Internal error, please retry later"
        if status_code == status.HTTP_504_GATEWAY_TIMEOUT:
            detail = "Verification timed out, no charge was applied"
        return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=status_code, detail=str(exc))


__all__ = ["to_http_exception"]
