import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from relaychat.core.config import Settings, get_settings
from relaychat.routers import health, messages, ui
from relaychat.services.chat_service import ChatService
from relaychat.services.completion_service import CompletionClient, build_completion_client
from relaychat.stores.messages import MessageStore


logger = logging.getLogger("relaychat")


def _validation_summary(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=500, content={"error": _validation_summary(exc)})


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    store: MessageStore | None = None,
    completion_client: CompletionClient | None = None,
) -> FastAPI:
    """Build the API with exactly one store and one chat service for its lifetime.

    Nothing is built at import time; uvicorn calls this as an app factory
    (`uvicorn relaychat.main:create_app --factory`).
    """
    settings = settings or get_settings()
    configure_logging(settings)
    store = store or MessageStore()
    completion_client = completion_client or build_completion_client(settings)

    app = FastAPI(title="Relay Chat API")
    app.state.settings = settings
    app.state.store = store
    app.state.chat_service = ChatService(store, completion_client, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(health.router)
    app.include_router(messages.router)
    app.include_router(ui.router)

    logger.info(
        "Relay chat ready: env=%s provider=%s model=%s history_limit=%s",
        settings.app_env,
        settings.model_provider,
        settings.chat_model,
        settings.get_history_limit() or "unlimited",
    )
    return app


def run():
    import uvicorn

    uvicorn.run(
        "relaychat.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
