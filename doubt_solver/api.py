"""
REST API for the doubt solver backend.

Two surfaces, thin wrappers around domain logic and persistence:
  - /functions/v1/solve-doubt: the explanation service (permissive CORS on every response).
  - /rest/v1/doubts: the record store (insert one, list newest first).
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from doubt_solver.auth import decode_token
from doubt_solver.config import ServerSettings, configure_logging
from doubt_solver.explanation import MissingFieldError, UpstreamError, solve_doubt
from doubt_solver.explanation.schemas import ErrorResponse, SolveDoubtRequest, SolveDoubtResponse
from doubt_solver.models import HISTORY_LIMIT, MAX_LIST_LIMIT, InputMethod
from doubt_solver.persistence import DoubtRepository, get_connection, get_db_path, init_db, set_db_path

logger = logging.getLogger(__name__)

FUNCTIONS_PREFIX = "/functions/v1"
REST_PREFIX = "/rest/v1"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Startup: ensure DB ----------
def _ensure_db() -> None:
    settings = ServerSettings.from_env()
    if settings.db_path:
        set_db_path(settings.db_path)
    init_db(db_path=get_db_path())


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    _ensure_db()
    logger.info("Doubt store ready at %s", get_db_path())
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Doubt Solver API",
    description="Simple explanations with examples for typed or spoken questions",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def function_cors(request: Request, call_next):
    """Every function response carries CORS headers; any OPTIONS is an empty 200."""
    if not request.url.path.startswith(FUNCTIONS_PREFIX):
        return await call_next(request)
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    response = await call_next(request)
    for key, value in CORS_HEADERS.items():
        response.headers[key] = value
    return response


# ---------- Error translation ----------


@app.exception_handler(MissingFieldError)
async def _missing_field(request: Request, exc: MissingFieldError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(UpstreamError)
async def _upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("Failed to process doubt: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to process doubt", "details": str(exc)},
    )


@app.exception_handler(RequestValidationError)
async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


# ---------- Request/Response models ----------

security = HTTPBearer(auto_error=False)


class CreateDoubtRequest(BaseModel):
    question: str = Field(..., min_length=1)
    explanation: str = Field(..., min_length=1)
    example: str | None = Field(default=None, description="Optional; stored as empty string when absent")
    subject: str | None = Field(default=None, description="Defaults to 'General' when blank")
    input_method: InputMethod = InputMethod.TEXT


def _get_current_user_id(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str | None:
    """Return user_id from the bearer token's sub claim, or None for anon/invalid tokens."""
    if credentials is None:
        return None
    claims = decode_token(credentials.credentials)
    if claims is None:
        return None
    return claims.get("sub")


# ---------- Endpoints ----------


@app.get("/health")
def health() -> dict[str, Any]:
    with db_conn() as conn:
        stored = DoubtRepository().count(conn)
    return {"status": "ok", "upstream": ServerSettings.from_env().has_upstream, "doubts": stored}


@app.post(
    f"{FUNCTIONS_PREFIX}/solve-doubt",
    response_model=SolveDoubtResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def solve_doubt_endpoint(req: SolveDoubtRequest) -> SolveDoubtResponse:
    """
    Explain a question simply, with an example.
    Without OPENAI_API_KEY a demo response is returned with 200.
    """
    try:
        result = solve_doubt(req.question, req.subject)
    except (MissingFieldError, UpstreamError):
        raise
    except Exception as e:
        logger.exception("Unexpected error solving doubt")
        raise UpstreamError(str(e)) from e
    return SolveDoubtResponse(explanation=result.explanation, example=result.example)


@app.post(f"{REST_PREFIX}/doubts", status_code=201)
def create_doubt(
    req: CreateDoubtRequest,
    user_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    """Persist one answered doubt. id and created_at are assigned here."""
    with db_conn() as conn:
        try:
            doubt = DoubtRepository().create(
                conn,
                question=req.question,
                explanation=req.explanation,
                example=req.example,
                subject=req.subject,
                input_method=req.input_method,
                user_id=user_id,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except sqlite3.Error as e:
            logger.error("Error saving doubt: %s", e)
            raise HTTPException(status_code=500, detail="Failed to store doubt")
    return doubt.to_dict()


@app.get(f"{REST_PREFIX}/doubts")
def list_doubts(limit: int = Query(default=HISTORY_LIMIT, ge=1, le=MAX_LIST_LIMIT)) -> list[dict[str, Any]]:
    """Most recent doubts, newest first."""
    with db_conn() as conn:
        try:
            doubts = DoubtRepository().list_recent(conn, limit)
        except sqlite3.Error as e:
            logger.error("Error fetching doubts: %s", e)
            raise HTTPException(status_code=500, detail="Failed to fetch doubts")
    return [d.to_dict() for d in doubts]


@app.get(f"{REST_PREFIX}/doubts/{{doubt_id}}")
def get_doubt(doubt_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        doubt = DoubtRepository().get(conn, doubt_id)
    if doubt is None:
        raise HTTPException(status_code=404, detail="Doubt not found")
    return doubt.to_dict()
