from fastapi import APIRouter, Request


router = APIRouter(prefix="/api", tags=["Health"])


@router.get("/health")
def health(request: Request):
    """Liveness check that also reports which model the process is wired to."""
    settings = request.app.state.settings
    return {"status": "ok", "provider": settings.model_provider, "model": settings.chat_model}
