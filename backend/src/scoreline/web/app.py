"""HTTP surface for the three gateways.

Each route accepts its parameters from the query string or, for POST, from a
JSON body (body values win). Gateway results are returned as JSON with the
gateway's status code.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from scoreline.config import get_settings
from scoreline.ingestion.h2h import fetch_h2h
from scoreline.ingestion.lineups import fetch_match_lineup
from scoreline.ingestion.match_data import fetch_match_data
from scoreline.models.gateway import GatewayResponse
from scoreline.models.h2h import MAX_STORED_MATCHES

logger = logging.getLogger(__name__)

# HTTP 204 cannot carry a body, so "not yet available" results go out as 200
# with this header set to the gateway status.
STATUS_HEADER = "X-Scoreline-Status"

app = FastAPI(title="Scoreline")
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[STATUS_HEADER],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


async def _params(request: Request) -> dict[str, Any]:
    params: dict[str, Any] = dict(request.query_params)
    if request.method == "POST":
        try:
            body = await request.json()
        except ValueError:
            logger.debug("No JSON body on %s", request.url.path)
            body = None
        if isinstance(body, dict):
            params.update({k: v for k, v in body.items() if v not in (None, "")})
    return params


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _respond(result: GatewayResponse) -> JSONResponse:
    content = jsonable_encoder(result.body)
    if result.status_code == 204:
        return JSONResponse(content, status_code=200, headers={STATUS_HEADER: "204"})
    return JSONResponse(content, status_code=result.status_code)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.api_route("/fetch-match-data", methods=["GET", "POST"])
async def match_data(request: Request):
    params = await _params(request)
    result = await run_in_threadpool(fetch_match_data, params.get("stgAzuroId"))
    return _respond(result)


@app.api_route("/fetch-h2h", methods=["GET", "POST"])
async def h2h(request: Request):
    params = await _params(request)
    result = await run_in_threadpool(
        fetch_h2h,
        params.get("homeTeamId"),
        params.get("awayTeamId"),
        _as_int(params.get("limit"), MAX_STORED_MATCHES),
        params.get("sport") or "football",
        params.get("leagueSlug"),
    )
    return _respond(result)


@app.api_route("/fetch-match-lineup", methods=["GET", "POST"])
async def match_lineup(request: Request):
    params = await _params(request)
    result = await run_in_threadpool(fetch_match_lineup, params.get("stgAzuroId"))
    return _respond(result)
