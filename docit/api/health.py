"""Health check endpoints"""

from fastapi import APIRouter

from docit.api.schemas import ApiResponse
from docit.db.session import get_pool_stats

router = APIRouter(prefix="/api/health", tags=["health"])

WARNING_UTILIZATION = 80
CRITICAL_UTILIZATION = 90


def _pool_status(utilization: float) -> str:
    if utilization >= CRITICAL_UTILIZATION:
        return "critical"
    if utilization >= WARNING_UTILIZATION:
        return "warning"
    return "healthy"


@router.get("/pool", response_model=ApiResponse[dict])
async def get_pool_health():
    """Database pool usage for monitoring"""
    stats = get_pool_stats()
    capacity = stats["size"] + stats["max_overflow"]
    utilization = stats["checked_out"] / capacity * 100 if capacity else 0.0

    return ApiResponse(data={
        "status": _pool_status(utilization),
        "poolSize": stats["size"],
        "maxOverflow": stats["max_overflow"],
        "available": stats["checked_in"],
        "inUse": stats["checked_out"],
        "overflow": stats["overflow"],
        "totalCapacity": capacity,
        "utilizationPercent": round(utilization, 2),
    })
