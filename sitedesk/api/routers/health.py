"""Health check endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from typing import Dict

from ..models import HealthStatus
from ..dependencies import get_sitedesk
from sitedesk import SiteDesk

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthStatus)
async def health_check(sitedesk: SiteDesk = Depends(get_sitedesk)) -> HealthStatus:
    """Health of every partition backend and of the backup store."""
    results = await sitedesk.check_health()
    blob_ok = results.pop("blob", False)
    partitions = {name.split(":", 1)[1]: ok for name, ok in results.items()}

    checks = list(partitions.values()) + [blob_ok]
    if all(checks):
        status = "healthy"
    elif not any(checks):
        status = "unhealthy"
    else:
        status = "degraded"

    return HealthStatus(status=status, partitions=partitions, blob=blob_ok)


@router.get("/ready")
async def readiness_probe(sitedesk: SiteDesk = Depends(get_sitedesk)) -> Dict[str, str]:
    """Kubernetes readiness probe."""
    health = await health_check(sitedesk)
    if health.status == "unhealthy":
        raise HTTPException(status_code=503, detail="Service not ready")
    return {"status": "ready"}


@router.get("/live")
async def liveness_probe() -> Dict[str, str]:
    """Kubernetes liveness probe."""
    return {"status": "alive"}
