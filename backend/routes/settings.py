"""Health check, settings, and connection check endpoints."""

import httpx
from fastapi import APIRouter

from backend import storage

from .models import CheckConnectionBody, SettingsUpdate

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.post("/check-connection")
async def check_connection(body: CheckConnectionBody):
    """Quick health check against an LLM provider URL."""
    url = f"{body.provider_url.rstrip('/')}/api/v1/model"
    headers: dict[str, str] = {}
    if body.api_key:
        headers["Authorization"] = f"Bearer {body.api_key}"
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            resp = await client.get(url, headers=headers)
            resp.raise_for_status()
        return {"ok": True}
    except httpx.HTTPError:
        return {"ok": False}


@router.get("/settings")
async def get_settings():
    """Get app settings (LLM connection, authored days, tag limit)."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: SettingsUpdate):
    """Update app settings (partial merge)."""
    return storage.update_config(body.model_dump(exclude_unset=True))
