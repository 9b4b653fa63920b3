import asyncio
import logging
from urllib.parse import quote

import aiohttp

logger = logging.getLogger("FaithDive")

DEFAULT_BASE_URL = "https://api.scripture.api.bible/v1"


class ScriptureClient:
    """Thin client for the upstream scripture API.

    Lookups never raise on upstream trouble: a missing verse comes back as
    ``None`` and failed listings as ``[]``, after logging the cause.
    """

    def __init__(self, api_key, base_url=DEFAULT_BASE_URL, timeout=30):
        self.api_key = api_key or ""
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout

    @property
    def _headers(self) -> dict:
        return {"api-key": self.api_key, "Accept": "application/json"}

    async def _get_json(self, url, params=None):
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params, headers=self._headers) as resp:
                    if resp.status != 200:
                        text = await resp.text()
                        logger.warning("Scripture API returned %d for %s: %s", resp.status, url, text[:200])
                        return None
                    return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logger.error("Scripture API request to %s failed: %s", url, exc)
            return None

    async def get_verse(self, reference: str, bible_id: str) -> dict | None:
        url = f"{self.base_url}/bibles/{quote(bible_id, safe='')}/passages/{quote(reference, safe='')}"
        data = await self._get_json(url)
        if data is None:
            return None
        passage = (data or {}).get("data") or {}
        return {
            "reference": passage.get("reference") or reference,
            "text": passage.get("content") or "",
            "bibleId": bible_id,
        }

    async def search(self, query: str, bible_id: str, limit: int = 10) -> list[dict]:
        url = f"{self.base_url}/bibles/{quote(bible_id, safe='')}/search"
        data = await self._get_json(url, params={"query": query, "limit": str(int(limit))})
        verses = ((data or {}).get("data") or {}).get("verses") or []
        return [{"reference": v.get("reference") or "", "text": v.get("text") or ""} for v in verses]

    async def list_translations(self) -> list[dict]:
        data = await self._get_json(f"{self.base_url}/bibles")
        bibles = (data or {}).get("data") or []
        return [{"id": b.get("id"), "name": b.get("name"), "abbreviation": b.get("abbreviation")} for b in bibles]
