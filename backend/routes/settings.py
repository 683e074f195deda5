"""Health check, settings, and LLM connection check endpoints."""

import httpx
from fastapi import APIRouter

from backend import storage
from backend.llm import resolve_connection

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get app settings (LLM connection, card prompt, limits, arcade, trivia)."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: dict):
    """Update app settings (partial merge)."""
    return storage.update_config(body)


@router.post("/check-connection")
async def check_connection():
    """Quick reachability check against the configured LLM provider."""
    conn = resolve_connection()
    if not conn["provider_url"]:
        return {"ok": False, "configured": False}

    base = conn["provider_url"].rstrip("/")
    url = f"{base}/api/v1/model" if conn["provider_format"] == "koboldcpp" else f"{base}/v1/models"
    headers: dict[str, str] = {}
    if conn["api_key"]:
        headers["Authorization"] = f"Bearer {conn['api_key']}"
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            resp = await client.get(url, headers=headers)
            resp.raise_for_status()
    except httpx.HTTPError:
        return {"ok": False, "configured": True}
    return {"ok": True, "configured": True}
