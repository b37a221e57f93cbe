import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.clock import Clock, SystemClock
from core.exceptions import InvalidDayIndexError, LedgerError, UnknownGoalError, UnknownTaskError
from core.local_store import LocalLedgerStore
from core.logger import get_logger
from core.paths import LEDGER_PATH
from core.repository import JsonFileRepository
from web.backend.routers import ledger, views

logger = get_logger("api")


def create_app(store: Optional[LocalLedgerStore] = None, clock: Optional[Clock] = None) -> FastAPI:
    app = FastAPI(title="Habit Ledger API", version="1.0")

    clock = clock or SystemClock()
    if store is None:
        logger.info("Using ledger file %s", LEDGER_PATH)
        store = LocalLedgerStore(JsonFileRepository(LEDGER_PATH), clock=clock)
    app.state.store = store
    app.state.clock = clock

    raw_origins = os.getenv("HABIT_LEDGER_ALLOWED_ORIGINS", "*")
    allow_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    allow_credentials = "*" not in allow_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        if isinstance(exc, (UnknownTaskError, UnknownGoalError)):
            status_code = 404
        elif isinstance(exc, InvalidDayIndexError):
            status_code = 422
        else:
            logger.error("Unhandled ledger error on %s: %s", request.url.path, exc.message)
            status_code = 500
        return JSONResponse(status_code=status_code, content={"detail": exc.message, "hint": exc.hint})

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "Habit Ledger"}

    app.include_router(ledger.router, prefix="/api", tags=["ledger"])
    app.include_router(views.router, prefix="/api", tags=["views"])

    return app
