# app/pages.py
from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from .api_routes import drop_files, get_entry
from .config import settings
from .store import SessionEntry, SessionStore, get_store
from .utils import format_confidence

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))
templates.env.filters["confidence"] = format_confidence

router = APIRouter()

FEATURES = [
    {
        "title": "Automated Report Generation",
        "description": "Generates detailed radiology reports from chest X-ray images using a conditioned GPT-2 model.",
    },
    {
        "title": "Visual Feature Extraction",
        "description": "Utilizes pre-trained models like CheXNet to extract essential features from X-ray images.",
    },
    {
        "title": "Conditioned Text Generation",
        "description": "Integrates image semantics with GPT-2 to produce coherent and contextually accurate reports.",
    },
    {
        "title": "Dataset-Driven Training",
        "description": "Leverages the IU-Xray dataset for training, ensuring relevance and accuracy in generated reports.",
    },
]

TESTIMONIALS = [
    {
        "quote": "This tool has revolutionized our radiology department's workflow.",
        "author": "Dr. Sarah Chen",
        "role": "Chief Radiologist",
    },
    {
        "quote": "The accuracy and speed of the AI analysis is remarkable.",
        "author": "Dr. Michael Roberts",
        "role": "Emergency Medicine",
    },
]


def _back_to(session_id: str) -> RedirectResponse:
    return RedirectResponse(f"/generator/{session_id}", status_code=303)


@router.get("/", response_class=HTMLResponse)
async def landing(request: Request):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"features": FEATURES, "testimonials": TESTIMONIALS, "app_name": settings.app_name},
    )


@router.get("/generator")
async def new_generator(store: SessionStore = Depends(get_store)):
    entry = store.create()
    return _back_to(entry.controller.session_id)


@router.get("/generator/{session_id}", response_class=HTMLResponse)
async def generator(request: Request, entry: SessionEntry = Depends(get_entry)):
    state = entry.response()
    return templates.TemplateResponse(
        request,
        "generator.html",
        {
            "state": state,
            "accept": ",".join(settings.allowed_extensions),
            "refresh_seconds": settings.processing_refresh_seconds,
            "app_name": settings.app_name,
        },
    )


@router.post("/generator/{session_id}/upload")
async def generator_upload(
    file: List[UploadFile] = File(...),
    entry: SessionEntry = Depends(get_entry),
):
    await drop_files(entry, file)
    return _back_to(entry.controller.session_id)


@router.post("/generator/{session_id}/dismiss")
async def generator_dismiss(entry: SessionEntry = Depends(get_entry)):
    entry.controller.dismiss_error()
    return _back_to(entry.controller.session_id)


@router.post("/generator/{session_id}/reset")
async def generator_reset(entry: SessionEntry = Depends(get_entry)):
    entry.controller.reset()
    return _back_to(entry.controller.session_id)
