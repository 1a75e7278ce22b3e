"""
arena/server.py - FastAPI front end for the league contract.

Endpoints:
    GET    /health                      Server health check
    GET    /game-types                  Registered game types
    POST   /leagues                     Create a league (caller becomes owner)
    GET    /leagues/{name}              League summary
    POST   /leagues/{name}/games        Record a game (owner or trusted)
    GET    /leagues/{name}/matches      Games between two players
    DELETE /leagues/{name}              Delete a league (owner; finished or force)

Mutating endpoints identify the caller by the X-Caller-Signature,
X-Caller-Timestamp and X-Caller-Nonce headers: an EIP-712 signature over the
method, path, query string, body hash, timestamp and nonce of the request
(see leagues/identity.py). A signature is accepted once, within
MAX_SIGNATURE_AGE seconds of its timestamp.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from leagues.contract import LeagueContract
from leagues.errors import (
    LeagueAuthorizationError,
    LeagueError,
    LeagueNotFoundError,
    LeagueStateError,
    LeagueValidationError,
)
from leagues.identity import (
    NONCE_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    ReplayGuard,
    caller_request,
    parse_nonce,
    recover_caller,
)

from .db import ArenaDB

logger = logging.getLogger(__name__)


# Global DB + contract, set during lifespan
_db: ArenaDB | None = None
_contract: LeagueContract | None = None
_replay_guard = ReplayGuard()


def get_db() -> ArenaDB:
    if _db is None:
        raise RuntimeError("DB not initialized")
    return _db


def get_contract() -> LeagueContract:
    if _contract is None:
        raise RuntimeError("Contract not initialized")
    return _contract


def use_db(db: ArenaDB | None) -> None:
    """Point the server at a DB (None to detach) and forget seen signatures."""
    global _db, _contract, _replay_guard
    _db = db
    _replay_guard = ReplayGuard()
    _contract = LeagueContract.open(db) if db is not None else None


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_path = getattr(app.state, "db_path", "leagues.db")
    use_db(ArenaDB(db_path))
    logger.info(f"League DB initialized: {db_path}")
    yield
    get_db().close()
    use_db(None)


app = FastAPI(title="Leagues Arena", lifespan=lifespan)


# ======================================================================
# Errors
# ======================================================================


def _status_for(error: LeagueError) -> int:
    if isinstance(error, LeagueValidationError):
        return 400
    if isinstance(error, LeagueAuthorizationError):
        return 403
    if isinstance(error, LeagueNotFoundError):
        return 404
    if isinstance(error, LeagueStateError):
        return 409
    return 422


@app.exception_handler(LeagueError)
async def league_error_handler(request: Request, exc: LeagueError) -> JSONResponse:
    status = _status_for(exc)
    logger.warning(f"{request.method} {request.url.path} rejected ({status}): {exc}")
    return JSONResponse(
        status_code=status,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


# ======================================================================
# Caller identity
# ======================================================================


async def get_caller(
    request: Request,
    signature: str = Header(..., alias=SIGNATURE_HEADER),
    timestamp: int = Header(..., alias=TIMESTAMP_HEADER),
    nonce: str = Header(..., alias=NONCE_HEADER),
) -> str:
    """Address that signed this exact request.

    Raises:
        InvalidSignatureError: malformed signature or nonce
        StaleSignatureError: timestamp too far from the server clock
        ReplayedSignatureError: the caller already used this nonce
    """
    nonce_bytes = parse_nonce(nonce)
    signed = caller_request(
        request.method,
        request.url.path,
        request.url.query,
        await request.body(),
        timestamp,
        nonce_bytes,
    )
    caller = recover_caller(signed, signature)
    _replay_guard.check(caller, timestamp, nonce_bytes)
    return caller


# ======================================================================
# Request/Response Models
# ======================================================================


class CreateLeagueRequest(BaseModel):
    league_name: str
    players: list[str]
    accounts: list[str] = []
    best_of: int
    game_type: str


class AddGameRequest(BaseModel):
    player_names: tuple[str, str]
    first_in_tuple_won: bool
    game_data: str = "{}"


class AddGameResponse(BaseModel):
    success: bool
    winner: str


class SuccessResponse(BaseModel):
    success: bool


class LeagueResponse(BaseModel):
    name: str
    players: list[str]
    best_of: int
    game_type: str
    owner: str
    trusted_accounts: list[str]
    matches: int
    finished: bool


class GameResponse(BaseModel):
    first_in_tuple_won: bool
    game_data: str


class MatchResponse(BaseModel):
    players: list[str]
    winner: str | None = None
    games: list[GameResponse] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    keys: int


# ======================================================================
# Endpoints
# ======================================================================


@app.get("/health", response_model=HealthResponse)
def health() -> dict[str, Any]:
    return {"status": "ok", "keys": get_db().key_count()}


@app.get("/game-types", response_model=list[str])
def game_types() -> list[str]:
    return LeagueContract.get_game_types()


@app.post("/leagues", response_model=SuccessResponse)
def create_league(
    req: CreateLeagueRequest, caller: str = Depends(get_caller)
) -> dict[str, Any]:
    get_contract().create_league(
        req.league_name, req.players, req.accounts, req.best_of, req.game_type, caller
    )
    return {"success": True}


@app.get("/leagues/{league_name}", response_model=LeagueResponse)
def get_league(league_name: str) -> dict[str, Any]:
    return get_contract().league_summary(league_name)


@app.post("/leagues/{league_name}/games", response_model=AddGameResponse)
def add_game(
    league_name: str, req: AddGameRequest, caller: str = Depends(get_caller)
) -> dict[str, Any]:
    winner = get_contract().add_game(
        league_name, req.player_names, req.first_in_tuple_won, req.game_data, caller
    )
    return {"success": True, "winner": winner.value}


@app.get("/leagues/{league_name}/matches", response_model=MatchResponse)
def get_match(league_name: str, first: str, second: str) -> dict[str, Any]:
    return get_contract().get_match(league_name, (first, second))


@app.delete("/leagues/{league_name}", response_model=SuccessResponse)
def delete_league(
    league_name: str, force: bool = False, caller: str = Depends(get_caller)
) -> dict[str, Any]:
    get_contract().delete_league(league_name, force, caller)
    return {"success": True}
