from fastapi import APIRouter

from epr.interfaces.http.routers import bills, verify, wallet


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(verify.router, prefix="/verify", tags=["verification"])
    router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
    router.include_router(bills.router, prefix="/bills", tags=["bills"])
    return router


__all__ = [
    "create_api_router",
]
