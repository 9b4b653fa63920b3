"""Offline cache for the application shell.

Mirrors the browser service-worker lifecycle: ``install`` downloads the
whole asset manifest into a cache generation named after the version,
``activate`` evicts older generations of this application and takes
control of open clients, and ``handle_fetch`` answers shell requests
stale-while-revalidate. API calls and foreign origins are never touched.
"""

import asyncio
import json
import logging
import os
import re
import sqlite3
from dataclasses import dataclass, field

import aiohttp
from yarl import URL

from .constants import CACHE_PREFIX, CACHE_VERSION, RUNTIME_ORIGINS, STATIC_ASSETS
from .errors import CacheInstallError
from .utils import now_iso

logger = logging.getLogger("FaithDive")

CACHE_SCHEMA_SQL = r"""
CREATE TABLE IF NOT EXISTS caches (
  name TEXT PRIMARY KEY,
  created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS cache_entries (
  cache_name TEXT NOT NULL,
  url TEXT NOT NULL,
  status INTEGER NOT NULL,
  headers_json TEXT NOT NULL,
  body BLOB NOT NULL,
  stored_at TEXT NOT NULL,
  PRIMARY KEY (cache_name, url),
  FOREIGN KEY (cache_name) REFERENCES caches(name) ON DELETE CASCADE
);
"""


@dataclass
class CachedResponse:
    url: str
    status: int
    headers: dict = field(default_factory=dict)
    body: bytes = b""


async def fetch_url(url, timeout=30):
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        async with session.get(url) as resp:
            body = await resp.read()
            return CachedResponse(url=url, status=resp.status, headers=dict(resp.headers), body=body)


class CacheStorage:
    """Named cache generations kept in a SQLite file."""

    def __init__(self, db_path):
        self.db_path = db_path
        os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
        conn = self._connect()
        try:
            conn.executescript(CACHE_SCHEMA_SQL)
            conn.commit()
        finally:
            conn.close()

    def _connect(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA busy_timeout = 5000")
        return conn

    @staticmethod
    def _ensure_cache(conn, name):
        conn.execute("INSERT OR IGNORE INTO caches(name,created_at) VALUES(?,?)", (name, now_iso()))

    @staticmethod
    def _write_entry(conn, name, url, response):
        conn.execute(
            """
            INSERT OR REPLACE INTO cache_entries(cache_name,url,status,headers_json,body,stored_at)
            VALUES(?,?,?,?,?,?)
            """,
            (
                name,
                url,
                int(response.status),
                json.dumps(dict(response.headers or {}), ensure_ascii=False),
                sqlite3.Binary(bytes(response.body or b"")),
                now_iso(),
            ),
        )

    def keys(self):
        conn = self._connect()
        try:
            rows = conn.execute("SELECT name FROM caches ORDER BY created_at ASC, rowid ASC").fetchall()
            return [r["name"] for r in rows]
        finally:
            conn.close()

    def has(self, name):
        return name in self.keys()

    def delete(self, name):
        conn = self._connect()
        try:
            cur = conn.execute("DELETE FROM caches WHERE name = ?", (name,))
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def put(self, name, url, response):
        conn = self._connect()
        try:
            self._ensure_cache(conn, name)
            self._write_entry(conn, name, url, response)
            conn.commit()
        finally:
            conn.close()

    def put_all(self, name, responses):
        """Store every ``(url, response)`` pair or none of them."""
        conn = self._connect()
        try:
            self._ensure_cache(conn, name)
            for url, response in responses:
                self._write_entry(conn, name, url, response)
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()

    def urls(self, name):
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT url FROM cache_entries WHERE cache_name = ? ORDER BY url ASC",
                (name,),
            ).fetchall()
            return [r["url"] for r in rows]
        finally:
            conn.close()

    def match(self, url, cache_name=None):
        sql = """
            SELECT e.url, e.status, e.headers_json, e.body
            FROM cache_entries e JOIN caches c ON c.name = e.cache_name
            WHERE e.url = ?
        """
        params = [url]
        if cache_name is not None:
            sql += " AND e.cache_name = ?"
            params.append(cache_name)
        sql += " ORDER BY c.created_at ASC, c.rowid ASC LIMIT 1"
        conn = self._connect()
        try:
            row = conn.execute(sql, params).fetchone()
            if not row:
                return None
            return CachedResponse(
                url=row["url"],
                status=int(row["status"]),
                headers=json.loads(row["headers_json"] or "{}"),
                body=bytes(row["body"]),
            )
        finally:
            conn.close()


class OfflineCacheManager:
    def __init__(
        self,
        storage,
        origin,
        version=CACHE_VERSION,
        assets=STATIC_ASSETS,
        runtime_origins=RUNTIME_ORIGINS,
        fetcher=None,
    ):
        self.storage = storage
        self.origin = URL(origin).origin()
        self.version = version
        self.cache_name = f"{CACHE_PREFIX}v{version}"
        self.assets = tuple(assets)
        self.allowed_origins = {self.origin} | {URL(o).origin() for o in runtime_origins}
        self.fetcher = fetcher or fetch_url
        self.state = "parsed"
        self.clients = {}
        self._skip_waiting = False
        self._pending = set()

    def resolve(self, url):
        return str(self.origin.join(URL(url)))

    def should_handle(self, url, method="GET"):
        if method.upper() != "GET":
            return False
        target = URL(self.resolve(url))
        if target.path.startswith("/api/"):
            return False
        return target.origin() in self.allowed_origins

    # ── lifecycle ──

    async def install(self):
        self.state = "installing"
        urls = [self.resolve(u) for u in self.assets]
        logger.info("[Offline cache] Installing version %s (%d assets)", self.version, len(urls))
        try:
            responses = await asyncio.gather(
                *(self._fetch_for_install(u) for u in urls),
                return_exceptions=True,
            )
            for response in responses:
                if isinstance(response, BaseException):
                    raise response
            self.storage.put_all(self.cache_name, list(zip(urls, responses)))
        except Exception as exc:
            self.state = "redundant"
            logger.error("[Offline cache] Installation failed: %s", exc)
            raise
        self.state = "installed"
        logger.info("[Offline cache] Installation complete")
        if self._skip_waiting:
            self.activate()

    async def _fetch_for_install(self, url):
        try:
            response = await self.fetcher(url)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            raise CacheInstallError(url, str(exc) or type(exc).__name__) from exc
        if response.status != 200:
            raise CacheInstallError(url, f"HTTP {response.status}")
        return response

    def activate(self):
        if self.state not in ("installed", "activated"):
            raise RuntimeError(f"cannot activate a cache in state {self.state!r}")
        self.state = "activating"
        logger.info("[Offline cache] Activating version %s", self.version)
        for name in self.storage.keys():
            if name != self.cache_name and name.startswith(CACHE_PREFIX):
                logger.info("[Offline cache] Deleting old cache: %s", name)
                self.storage.delete(name)
        self.claim()
        self.state = "activated"
        logger.info("[Offline cache] Activation complete")

    def skip_waiting(self):
        self._skip_waiting = True
        if self.state == "installed":
            self.activate()

    # ── clients ──

    def register_client(self, client_id):
        controller = self.version if self.state == "activated" else None
        self.clients.setdefault(client_id, controller)

    def unregister_client(self, client_id):
        self.clients.pop(client_id, None)

    def claim(self):
        for client_id in self.clients:
            self.clients[client_id] = self.version

    def controller_of(self, client_id):
        return self.clients.get(client_id)

    # ── messages ──

    def handle_message(self, message):
        kind = (message or {}).get("type") if isinstance(message, dict) else None
        if kind == "SKIP_WAITING":
            logger.info("[Offline cache] Received SKIP_WAITING message")
            self.skip_waiting()
            return None
        if kind == "GET_VERSION":
            return {"version": self.version}
        return None

    # ── fetch ──

    async def handle_fetch(self, url, method="GET"):
        """Answer a request from cache or network; ``None`` means pass through."""
        if not self.should_handle(url, method):
            return None
        key = self.resolve(url)

        cached = self.storage.match(key)
        if cached is not None:
            logger.debug("[Offline cache] Serving from cache: %s", key)
            self._schedule_revalidate(key)
            return cached

        logger.debug("[Offline cache] Fetching from network: %s", key)
        try:
            response = await self.fetcher(key)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            logger.error("[Offline cache] Fetch failed for %s: %s", key, exc)
            raise
        if response.status == 200:
            self.storage.put(self.cache_name, key, response)
        return response

    def _schedule_revalidate(self, url):
        task = asyncio.get_running_loop().create_task(self._revalidate(url))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _revalidate(self, url):
        # The cached copy was already served; nobody awaits this task.
        try:
            response = await self.fetcher(url)
            if response.status == 200:
                self.storage.put(self.cache_name, url, response)
        except Exception as exc:
            logger.debug("[Offline cache] Background update failed for %s: %s", url, exc)

    async def drain(self):
        """Wait for pending background revalidations."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


_asset_ref_re = re.compile(r"""(?:src|href)\s*=\s*["']([^"']+)["']""", re.IGNORECASE)


def find_version_mismatches(markup, version=CACHE_VERSION):
    """Return ``(url, found_version)`` for shell assets tagged with another ``?v=``."""
    mismatches = []
    for ref in _asset_ref_re.findall(markup or ""):
        found = URL(ref).query.get("v")
        if found is not None and found != version:
            mismatches.append((ref, found))
    return mismatches
