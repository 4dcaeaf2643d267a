"""
Capability health check routes - probe each external service.
"""

from fastapi import APIRouter, HTTPException

from ..services.capabilities.health import CAPABILITIES, check_all, check_capability

router = APIRouter(prefix="/api/check", tags=["checks"])


@router.get("/all")
async def check_all_capabilities():
    """Probe every capability and summarize."""
    return await check_all()


@router.get("/{capability}")
async def check_one_capability(capability: str):
    key = capability.replace("-", "_").lower()
    if key not in CAPABILITIES:
        raise HTTPException(status_code=404, detail=f"Unknown capability '{capability}'")
    return await check_capability(key)
