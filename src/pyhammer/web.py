"""aiohttp application exposing the read, vote and comment operations.

Routes::

    GET  /state     -> {"ok": true, "state": {...}}
    POST /vote      -> {"ok": true, "state": {...}} | {"ok": false, "error": CODE}
    POST /comment   -> {"ok": true, "state": {...}} | {"ok": false, "error": CODE}

Every response is JSON and carries ``cache-control: no-store``.
"""

from __future__ import annotations

import functools
import json
import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web

from pyhammer._redact import redact_headers
from pyhammer.exceptions import HammerAlreadyVotedError, HammerRequestError, HammerStorageError, HammerValidationError
from pyhammer.models.state import StateDocument
from pyhammer.service import HammerService

_logger = logging.getLogger(__name__)

SERVICE_KEY = web.AppKey("service", HammerService)

_NO_STORE = {"cache-control": "no-store"}
_NON_WORD = re.compile(r"[^A-Z0-9]+")
_dumps = functools.partial(json.dumps, ensure_ascii=False, separators=(",", ":"))

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _json(payload: dict[str, Any], status: int = 200) -> web.Response:
    return web.json_response(payload, status=status, headers=_NO_STORE, dumps=_dumps)


def _state_response(doc: StateDocument) -> web.Response:
    return _json({"ok": True, "state": doc.to_wire()})


def _error_response(code: str, status: int, **extra: Any) -> web.Response:
    return _json({"ok": False, "error": code, **extra}, status=status)


def _http_error_response(exc: web.HTTPException) -> web.Response:
    code = _NON_WORD.sub("_", exc.reason.upper()).strip("_") or "HTTP_ERROR"
    response = _error_response(code, exc.status)
    if "Allow" in exc.headers:
        response.headers["Allow"] = exc.headers["Allow"]
    return response


async def _read_body(request: web.Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        raise HammerValidationError("BAD_JSON", "request body is not valid JSON") from exc


@web.middleware
async def error_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    """Map errors to JSON error responses.

    Request errors keep their wire code and status; aiohttp's own 4xx/5xx
    (unknown route, wrong method) become their reason phrase in upper snake
    case; storage failures become a generic ``STORAGE_ERROR``; anything else
    is logged and reported as ``INTERNAL_ERROR``. Failures stay confined to
    the request that raised them.
    """
    service = request.app[SERVICE_KEY]
    _logger.debug(
        "%s %s headers=%s",
        request.method,
        request.path,
        redact_headers(request.headers, extra=(service.config.client_ip_header,)),
    )
    try:
        return await handler(request)
    except web.HTTPException as exc:
        if exc.status < 400:
            raise
        _logger.debug("HTTP %d for %s %s", exc.status, request.method, request.path)
        return _http_error_response(exc)
    except HammerRequestError as exc:
        _logger.debug("Rejected %s %s: %s", request.method, request.path, exc.code)
        return _error_response(exc.code, exc.status)
    except HammerStorageError:
        _logger.warning("Storage failure handling %s %s", request.method, request.path, exc_info=True)
        return _error_response("STORAGE_ERROR", 503)
    except Exception as exc:
        _logger.exception("Unexpected error handling %s %s", request.method, request.path)
        return _error_response("INTERNAL_ERROR", 500, detail=str(exc))


async def handle_state(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    return _state_response(await service.read_state())


async def handle_vote(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    vote = service.parse_vote(await _read_body(request))
    identity = service.identity.resolve_headers(request.headers, request.cookies)

    try:
        doc = await service.cast_vote(vote, identity)
    except HammerAlreadyVotedError as exc:
        response = _error_response(exc.code, exc.status)
    else:
        response = _state_response(doc)

    if identity.issued:
        resolver = service.identity
        response.set_cookie(resolver.cookie_name, identity.token, **resolver.cookie_options())
    return response


async def handle_comment(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    comment = service.parse_comment(await _read_body(request))
    return _state_response(await service.post_comment(comment))


def create_app(service: HammerService) -> web.Application:
    """Build the web application around *service*."""
    app = web.Application(middlewares=[error_middleware])
    app[SERVICE_KEY] = service
    app.router.add_get("/state", handle_state)
    app.router.add_post("/vote", handle_vote)
    app.router.add_post("/comment", handle_comment)
    return app
