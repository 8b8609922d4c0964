"""
Health Checks
=============
Liveness and readiness endpoints with per-component status.
"""

import time
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel
import structlog

logger = structlog.get_logger(__name__)

PingFn = Callable[[], Awaitable[bool]]


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    components: Dict[str, ComponentHealth]
    timestamp: float


async def check_component(name: str, ping: PingFn) -> ComponentHealth:
    """Run one ping and time it. Failures are reported, never raised."""
    try:
        start = time.perf_counter()
        ok = await ping()
        latency = (time.perf_counter() - start) * 1000
        if not ok:
            return ComponentHealth(status="error", error="ping failed")
        return ComponentHealth(status="connected", latency_ms=round(latency, 2))
    except Exception as e:
        logger.error("health_check_failed", component=name, error=str(e))
        return ComponentHealth(status="error", error=type(e).__name__)


def create_health_router(
    service_name: str,
    version: str,
    checks: Dict[str, PingFn],
    critical: tuple = ("users",),
) -> APIRouter:
    """
    Build /health, /health/live and /health/ready.

    Args:
        service_name: Reported in the /health body
        version: Service version
        checks: Component name to async ping function
        critical: Components whose failure makes the service unhealthy
            and not ready; any other failing component only degrades it
    """
    router = APIRouter(tags=["Health"])

    @router.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        components: Dict[str, ComponentHealth] = {}
        overall = HealthStatus.HEALTHY

        for name, ping in checks.items():
            result = await check_component(name, ping)
            components[name] = result
            if result.status == "error":
                if name in critical:
                    overall = HealthStatus.UNHEALTHY
                elif overall == HealthStatus.HEALTHY:
                    overall = HealthStatus.DEGRADED

        return HealthResponse(
            status=overall,
            service=service_name,
            version=version,
            components=components,
            timestamp=time.time(),
        )

    @router.get("/health/live")
    async def liveness_probe():
        return {"status": "alive"}

    @router.get("/health/ready")
    async def readiness_probe():
        for name in critical:
            ping = checks.get(name)
            if ping is None:
                continue
            result = await check_component(name, ping)
            if result.status == "error":
                return Response(
                    content=f'{{"status": "not_ready", "reason": "{name}_unavailable"}}',
                    status_code=503,
                    media_type="application/json",
                )
        return {"status": "ready"}

    return router
