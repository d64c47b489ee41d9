from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse


router = APIRouter(tags=["UI"])
STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


@router.get("/", include_in_schema=False)
def chat_page():
    """Serve the single-page chat client."""
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")
