import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request

from .errors import MissingFields
from .leaderboard import LEADERBOARD_CAPACITY
from .service import ScoreService

router = APIRouter()

DEFAULT_LEADERBOARD_LIMIT = 50


def get_service(request: Request) -> ScoreService:
    return request.app.state.service


def client_identity(request: Request) -> str:
    """Source address of the caller, or the first proxy hop when trusted."""
    if request.app.state.settings.trust_proxy:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client is None:
        return "unknown"
    return request.client.host


def parse_limit(raw: Optional[str]) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LEADERBOARD_LIMIT
    if limit < 1:
        return DEFAULT_LEADERBOARD_LIMIT
    return min(limit, LEADERBOARD_CAPACITY)


async def read_json(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise MissingFields() from None


@router.get("/health")
async def health_check(service: ScoreService = Depends(get_service)):
    return service.health()


@router.post("/start-session")
async def start_session(request: Request, service: ScoreService = Depends(get_service)):
    return service.start_session(client_identity(request))


@router.post("/submit-score")
async def submit_score(request: Request, service: ScoreService = Depends(get_service)):
    data = await read_json(request)
    return service.submit_score(data, client_identity(request))


@router.get("/leaderboard")
async def get_leaderboard(limit: Optional[str] = None, service: ScoreService = Depends(get_service)):
    return service.top_scores(parse_limit(limit))
