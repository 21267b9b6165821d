"""
Instagram Username Extractor - FastAPI Application

Upload images, extract usernames, review and copy profile links.
"""

from fastapi import FastAPI, Request, UploadFile, File, Form, Depends
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware
from datetime import datetime
from pathlib import Path
from typing import List
import uuid

from .processing.logger import setup_logger
from .processing import (
    load_settings, Settings, InputFile, ResultStore, ResultStoreRegistry, ExtractionClient, BatchError,
    is_image_type, select_input_files, process_batch, build_links_text, profile_url
)
from . import __version__

logger = setup_logger('main')

settings = load_settings()

# Initialize FastAPI app
app = FastAPI(title="Instagram Username Extractor", version=__version__)
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)

BASE_DIR = Path(__file__).parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.globals['profile_url'] = profile_url

# One result store per browser session; nothing outlives the process
stores = ResultStoreRegistry(
    max_sessions=settings.max_sessions,
    idle_seconds=settings.session_idle_seconds
)


def get_settings() -> Settings:
    return settings


def get_extraction_client(request: Request) -> ExtractionClient:
    """Extraction client built once per app from settings."""
    client = getattr(request.app.state, 'extraction_client', None)
    if client is None:
        client = ExtractionClient.from_settings(settings)
        request.app.state.extraction_client = client
        if not settings.has_api_key:
            logger.warning("OPENROUTER_API_KEY is not set - extraction requests will fail")
    return client


def get_result_store(request: Request) -> ResultStore:
    """
    Result store for the current session.

    Sessions without a store get an empty, unregistered one, so reads and
    edits never allocate. Only create_result_store() registers a store.
    """
    store = stores.get(request.session.get('sid'))
    return store if store is not None else ResultStore()


def create_result_store(request: Request) -> ResultStore:
    store = stores.get(request.session.get('sid'))
    if store is None:
        sid = uuid.uuid4().hex
        request.session['sid'] = sid
        store = stores.create(sid)
    return store


def redirect_home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


@app.get("/", response_class=HTMLResponse)
async def index_page(
    request: Request,
    store: ResultStore = Depends(get_result_store),
    app_settings: Settings = Depends(get_settings)
):
    """Upload form, error banner and results."""
    return templates.TemplateResponse(request, "index.html", {
        "title": "Instagram Username Extractor",
        "result_set": store.result_set,
        "error": store.error,
        "is_loading": store.is_loading,
        "max_files": app_settings.max_files,
    })


@app.post("/process")
async def handle_process(
    request: Request,
    files: List[UploadFile] = File(default=[]),
    client: ExtractionClient = Depends(get_extraction_client),
    app_settings: Settings = Depends(get_settings)
):
    """Run one batch over the uploaded images."""
    candidates = []
    for upload in files:
        if not is_image_type(upload.content_type):
            continue
        candidates.append(InputFile(
            name=upload.filename or "image",
            mime_type=upload.content_type,
            data=await upload.read()
        ))

    selected = select_input_files(candidates, app_settings.max_files)
    if not selected:
        logger.info("No images selected - nothing to process")
        return redirect_home()

    store = create_result_store(request)
    token = store.begin_batch()
    try:
        result_set = await process_batch(selected, client)
    except BatchError as e:
        logger.error(f"Batch failed: {e.message}")
        store.fail_batch(token, e.message)
    else:
        store.commit_batch(token, result_set)

    return redirect_home()


@app.post("/results/{image_index}/usernames/{username_index}/edit")
async def edit_username(image_index: int, username_index: int, store: ResultStore = Depends(get_result_store)):
    store.begin_edit(image_index, username_index)
    return redirect_home()


@app.post("/results/{image_index}/usernames/{username_index}/cancel")
async def cancel_edit(image_index: int, username_index: int, store: ResultStore = Depends(get_result_store)):
    store.cancel_edit(image_index, username_index)
    return redirect_home()


@app.post("/results/{image_index}/usernames/{username_index}/update")
async def update_username(
    image_index: int,
    username_index: int,
    username: str = Form(default=""),
    store: ResultStore = Depends(get_result_store)
):
    """Save an edit. An empty value removes the username."""
    store.submit_edit(image_index, username_index, username)
    return redirect_home()


@app.post("/results/{image_index}/usernames/{username_index}/delete")
async def delete_username(image_index: int, username_index: int, store: ResultStore = Depends(get_result_store)):
    store.delete_username(image_index, username_index)
    return redirect_home()


@app.post("/clear")
async def clear_results(request: Request, store: ResultStore = Depends(get_result_store)):
    """Reset the session and release its stored images."""
    store.clear()
    stores.discard(request.session.pop('sid', None))
    return redirect_home()


@app.get("/links", response_class=PlainTextResponse)
async def get_links(store: ResultStore = Depends(get_result_store)):
    """Profile links, one per line, for the browser clipboard."""
    return PlainTextResponse(build_links_text(store.result_set))


@app.get("/api/results")
async def get_results_api(store: ResultStore = Depends(get_result_store)):
    result_set = store.result_set
    return {
        "results": result_set.to_summary(),
        "total_usernames": result_set.total_usernames,
        "error": store.error,
        "is_loading": store.is_loading,
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting server on 0.0.0.0:{settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level="info")
