"""FastAPI entrypoint for the quiz engine."""

import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from quiz_engine.config import LOG_FORMAT, LOG_LEVEL, SESSION_SECRET_KEY
from quiz_engine.database import create_db_and_tables
from quiz_engine.exceptions import CorruptStoreError
from quiz_engine.logging_config import bind_request_id, configure_logging, reset_request_id
from quiz_engine.routers import attempts as attempts_router_module
from quiz_engine.routers import quizzes as quizzes_router_module
from quiz_engine.services.attempt_service import AttemptSessions
from quiz_engine.services.catalog_service import QuizCatalog
from quiz_engine.store import KeyValueStore

logger = logging.getLogger(__name__)


def create_app(bind=None) -> FastAPI:
    """Build the application around a store on `bind` (default engine if None)."""
    app = FastAPI(title="Quiz Engine")

    store = KeyValueStore(bind)
    app.state.store = store
    app.state.catalog = QuizCatalog(store)
    app.state.attempt_sessions = AttemptSessions(app.state.catalog)

    @app.exception_handler(CorruptStoreError)
    async def corrupt_store_handler(request: Request, exc: CorruptStoreError):
        """A corrupt collection is a server fault, not an empty result."""
        logger.error("Corrupt store key %s: %s", exc.key, exc.reason, extra={"store_key": exc.key})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Stored data for {exc.key!r} is corrupt"},
        )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        token = bind_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers["x-request-id"] = request_id
        return response

    # Session middleware holds the key of each learner's live attempt
    app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET_KEY)

    app.include_router(quizzes_router_module.router, prefix="/quizzes", tags=["quizzes"])
    app.include_router(attempts_router_module.router, tags=["attempts"])

    @app.on_event("startup")
    def on_startup():
        """Create the store table and load the catalog."""
        create_db_and_tables(store.engine)
        quizzes = app.state.catalog.fetch_quizzes()
        logger.info("Loaded %d quizzes", len(quizzes))

    return app


configure_logging(LOG_LEVEL, LOG_FORMAT)

app = create_app()
