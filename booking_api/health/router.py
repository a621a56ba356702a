from fastapi import APIRouter, Request
from booking_api.confirmation.dedupe import dedupe_health_info
from booking_api.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root(request: Request):
    return {
        "ok": True,
        "rate_limit": rate_limit_health_info(request),
        "dedupe": dedupe_health_info(request),
    }
