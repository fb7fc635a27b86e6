from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException

from .config import NormalizerSettings, load_settings
from .logs import setup_logging
from .models import DocumentSaved, HealthResponse, NormalizationReport
from .pipeline import handle_document_saved


def get_settings() -> NormalizerSettings:
    return load_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(get_settings().log_file)
    yield


app = FastAPI(
    title="utf8bom",
    description="Normalizes saved text files to UTF-8 with BOM",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/saved", response_model=NormalizationReport)
def document_saved(event: DocumentSaved, settings: NormalizerSettings = Depends(get_settings)):
    if not Path(event.path).is_absolute():
        raise HTTPException(status_code=422, detail="path must be absolute")
    if event.kind in settings.text_document_kinds and not Path(event.path).is_file():
        raise HTTPException(status_code=404, detail=f"File not found: {event.path}")

    return handle_document_saved(event, settings=settings)
