from __future__ import annotations

import json
from typing import Any

import httpx
from loguru import logger

from curate.core.config import settings
from curate.errors import NetworkError


def normalize_ipfs_path(path: str) -> str:
    """Strip ``/ipfs/`` or ``ipfs://`` so the remainder can be appended to a gateway."""

    cleaned = path.strip()
    for marker in ("/ipfs/", "ipfs://"):
        if cleaned.startswith(marker):
            cleaned = cleaned[len(marker) :]
            break
    return cleaned.lstrip("/")


class IpfsClient:
    """Thin wrapper around the Kleros IPFS upload function and CDN gateway."""

    def __init__(
        self,
        *,
        upload_url: str | None = None,
        gateway_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.upload_url = upload_url or settings.ipfs_upload_url
        self.gateway_url = (gateway_url or settings.ipfs_gateway_url).rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout or settings.request_timeout_seconds,
            follow_redirects=True,
        )

    async def upload(self, data: bytes, file_name: str) -> str:
        files = {"data": (file_name, data, "application/octet-stream")}
        try:
            response = await self.client.post(self.upload_url, files=files)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("IPFS upload of {} failed: {}", file_name, exc)
            raise NetworkError(f"Failed to upload to IPFS: {exc}") from exc

        cids = payload.get("cids") if isinstance(payload, dict) else None
        if not cids:
            raise NetworkError("IPFS upload response did not include a content identifier")
        cid = cids[0]
        logger.info("Uploaded {} to IPFS: {}", file_name, cid)
        return cid

    async def upload_json(self, data: Any, file_name: str = "item.json") -> str:
        encoded = json.dumps(data, indent=2).encode("utf-8")
        return await self.upload(encoded, file_name)

    async def fetch(self, ipfs_path: str) -> Any:
        url = f"{self.gateway_url}/ipfs/{normalize_ipfs_path(ipfs_path)}"
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Fetching {} from IPFS failed: {}", ipfs_path, exc)
            raise NetworkError(f"Failed to fetch from IPFS: {exc}") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "IpfsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
