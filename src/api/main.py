"""SnapSong HTTP API: photo upload -> song, preview clip and caption."""

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.config import get_config
from src.core.errors import SnapSongError, ValidationError
from src.pipeline.orchestrator import RecommendationOrchestrator, build_orchestrator

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _get_orchestrator() -> RecommendationOrchestrator:
    return build_orchestrator(get_config())


app = FastAPI(title="SnapSong")


@app.exception_handler(SnapSongError)
async def _snapsong_error_handler(request: Request, exc: SnapSongError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def _describe_form_error(err: dict) -> str:
    field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    return f"{field}: {err.get('msg', 'invalid')}"


@app.exception_handler(RequestValidationError)
async def _form_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed form fields get the same error body as every other client error
    problems = "; ".join(_describe_form_error(err) for err in exc.errors())
    error = ValidationError("Invalid request form", details=problems or None)
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.get("/health")
def health(
    orchestrator: RecommendationOrchestrator = Depends(_get_orchestrator),
) -> dict[str, str]:
    return {"status": "ok", "analyzer": orchestrator.analyzer.get_model_card().name}


@app.post("/analyze")
def analyze(
    photo: UploadFile | None = File(default=None, description="Photo to find a song for"),
    postType: str | None = Form(default=None, description="'post' or 'story' (default 'post')"),
    regenerate: str | None = Form(default=None, description="Optional: 'song' or 'caption'"),
    orchestrator: RecommendationOrchestrator = Depends(_get_orchestrator),
) -> JSONResponse:
    # One byte past the cap is enough for the size check to reject an oversized upload
    data = photo.file.read(orchestrator.max_upload_bytes + 1) if photo is not None else None
    response = orchestrator.handle(data, post_type=postType, regenerate=regenerate)
    return JSONResponse(content=response.to_payload())
