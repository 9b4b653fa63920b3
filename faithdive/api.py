import json
import logging
import os
import time
from datetime import datetime, timezone

from aiohttp import web

from .constants import APP_NAME
from .errors import ImportDataError, PersistenceError
from .paths import get_public_dir

logger = logging.getLogger("FaithDive")

SERVICES_KEY = web.AppKey("services", object)


def _json_response(obj, status=200):
    return web.Response(
        status=status,
        text=json.dumps(obj, ensure_ascii=False),
        content_type="application/json",
    )


def _bad_request(msg):
    return _json_response({"error": msg}, status=400)


def _download_name(ext):
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return f"faithdive-backup-{stamp}.{ext}"


@web.middleware
async def error_middleware(request, handler):
    started = time.monotonic()
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error in %s %s", request.method, request.path)
        return _json_response({"error": "Internal server error"}, status=500)
    finally:
        logger.debug("Request to %s took %.2f seconds", request.path, time.monotonic() - started)


def setup_routes(app, services):
    routes = web.RouteTableDef()
    public_dir = os.path.realpath(get_public_dir(services.config.get("public_dir") or None))

    @routes.get("/api/health")
    async def health(_request):
        return _json_response({"status": "healthy", "service": f"{APP_NAME} API"})

    @routes.get("/api/bible/translations")
    async def translations(_request):
        items = await services.scripture.list_translations()
        if not items:
            return _json_response({"error": "Unable to fetch translations"}, status=503)
        return _json_response(items)

    @routes.get("/api/bible/verse/{reference}")
    async def verse(request):
        reference = request.match_info["reference"]
        bible_id = request.query.get("bible_id", "")
        if not bible_id:
            return _bad_request("bible_id query parameter is required")
        found = await services.scripture.get_verse(reference, bible_id)
        if not found:
            return _json_response({"error": f"Verse '{reference}' not found"}, status=404)
        return _json_response(found)

    @routes.get("/api/bible/search")
    async def search(request):
        q = request.query.get("q", "")
        bible_id = request.query.get("bible_id", "")
        if not q:
            return _bad_request("q query parameter is required")
        if not bible_id:
            return _bad_request("bible_id query parameter is required")
        try:
            limit = max(1, min(100, int(request.query.get("limit", "10"))))
        except (TypeError, ValueError):
            limit = 10
        verses = await services.scripture.search(q, bible_id, limit)
        return _json_response({"verses": verses, "total": len(verses)})

    @routes.get("/api/local/export")
    async def export_local(_request):
        return web.Response(
            text=services.exchange.export_json(),
            content_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{_download_name("json")}"'},
        )

    @routes.post("/api/local/import")
    async def import_local(request):
        try:
            payload = await request.json()
        except ValueError:
            return _bad_request("Unable to parse import request")
        if not isinstance(payload, dict):
            return _bad_request("Request body must be a JSON object")
        replace = payload.get("replace", False)
        if not isinstance(replace, bool):
            return _bad_request("replace must be true or false")
        try:
            if "document" in payload:
                result = services.exchange.import_all(payload.get("document"), replace=replace)
            else:
                result = services.exchange.import_json(str(payload.get("content", "") or ""), replace=replace)
        except ImportDataError as exc:
            return _json_response({"error": exc.reason, "detail": exc.detail}, status=400)
        except PersistenceError as exc:
            # Rows are imported in memory but were not written to disk.
            return _json_response({"error": exc.reason, "detail": exc.detail}, status=507)
        return _json_response(result)

    @routes.route("*", "/api/{tail:.*}")
    async def api_not_found(_request):
        return _json_response({"error": "API endpoint not found"}, status=404)

    @routes.get("/{tail:.*}")
    async def static_or_index(request):
        tail = request.match_info["tail"]
        candidate = os.path.realpath(os.path.join(public_dir, tail))
        if candidate.startswith(public_dir + os.sep) and os.path.isfile(candidate):
            return web.FileResponse(candidate)
        index = os.path.join(public_dir, "index.html")
        if os.path.isfile(index):
            return web.FileResponse(index)
        raise web.HTTPNotFound()

    app.add_routes(routes)


def create_app(services):
    app = web.Application(middlewares=[error_middleware])
    app[SERVICES_KEY] = services
    setup_routes(app, services)
    return app
