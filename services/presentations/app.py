from fastapi import Depends, FastAPI, File, Form, HTTPException, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from services.outline_generation.service import OutlineGenerationService
from services.presentations.editing import replace_slide
from services.presentations.store import InMemoryPresentationStore, PresentationStore
from services.presentations.themes import THEMES
from shared.enums import StoreBackend
from shared.errors import (
    GenerationError,
    InvalidRequestError,
    PresentationNotFoundError,
    SlideIndexError,
)
from shared.file_utils import (
    build_document_context,
    decode_document_text,
    sanitize_filename,
    to_data_uri,
)
from shared.models import (
    DEFAULT_PRESENTATION_TITLE,
    AIModelInfo,
    APIResponse,
    Document,
    DocumentCreate,
    ExportRequest,
    ExportResponse,
    Presentation,
    PresentationCreate,
    PresentationUpdate,
    RepromptRequest,
    SlideImageCreate,
    SlideImageRecord,
    ThemeInfo,
)
from shared.utils import config, setup_logging

logger = setup_logging("presentation-service")

app = FastAPI(
    title="Presentation Service",
    description="Prompt-to-deck outline generation and collaborative slide editing",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def create_presentation_store() -> PresentationStore:
    """Build the store selected by PRESENTATION_STORE."""
    backend = StoreBackend(config.get("presentation_store", StoreBackend.MEMORY.value))
    if backend is StoreBackend.SQL:
        from services.presentations.sql_store import SQLPresentationStore

        logger.info("Using SQL presentation store")
        return SQLPresentationStore(config.get("database_url"))
    return InMemoryPresentationStore()


app.state.presentation_store = create_presentation_store()
app.state.generation_service = OutlineGenerationService(logger)


def get_presentation_store() -> PresentationStore:
    return app.state.presentation_store


def get_generation_service() -> OutlineGenerationService:
    return app.state.generation_service


async def _read_upload(upload: UploadFile) -> bytes:
    data = await upload.read()
    max_bytes = config.get("max_upload_bytes", 10 * 1024 * 1024)
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=413, detail=f"File '{upload.filename}' exceeds {max_bytes} bytes"
        )
    return data


@app.get("/health")
async def health_check():
    return APIResponse(message="Presentation Service is healthy")


@app.get("/themes", response_model=list[ThemeInfo])
async def list_themes():
    return THEMES


@app.get("/models", response_model=list[AIModelInfo])
async def list_models(generation: OutlineGenerationService = Depends(get_generation_service)):
    return generation.list_models()


@app.get("/presentations", response_model=list[Presentation])
async def list_presentations(store: PresentationStore = Depends(get_presentation_store)):
    return await store.list_presentations()


@app.post("/presentations/generate-outline", response_model=Presentation)
async def generate_outline(
    prompt: str | None = Form(None),
    ai_model: str | None = Form(None, alias="aiModel"),
    documents: list[UploadFile] | None = File(None),
    store: PresentationStore = Depends(get_presentation_store),
    generation: OutlineGenerationService = Depends(get_generation_service),
) -> Presentation:
    """Generate an outline from a prompt and optional documents, then store it as a new presentation.

    Nothing is stored when generation fails.
    """
    if not prompt or not prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    uploaded: list[tuple[str, str, str]] = []
    for upload in documents or []:
        data = await _read_upload(upload)
        filename = sanitize_filename(upload.filename or "document")
        uploaded.append((filename, decode_document_text(data), upload.content_type or "text/plain"))

    try:
        outline = await generation.generate_outline(
            prompt,
            build_document_context((filename, text) for filename, text, _ in uploaded),
            ai_model,
        )
    except InvalidRequestError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e
    except GenerationError as e:
        logger.error(f"Error generating outline: {e}")
        raise HTTPException(
            status_code=e.status_code, detail=f"Failed to generate outline: {e!s}"
        ) from e

    presentation = await store.create_presentation(
        PresentationCreate(
            title=outline.title or DEFAULT_PRESENTATION_TITLE,
            prompt=prompt,
            slides=outline.slides,
        )
    )
    for filename, text, content_type in uploaded:
        await store.create_document(
            DocumentCreate(
                filename=filename,
                content=text,
                type=content_type,
                presentation_id=presentation.id,
            )
        )
    return presentation


@app.get("/presentations/{presentation_id}", response_model=Presentation)
async def get_presentation(
    presentation_id: int, store: PresentationStore = Depends(get_presentation_store)
):
    presentation = await store.get_presentation(presentation_id)
    if presentation is None:
        raise HTTPException(status_code=404, detail="Presentation not found")
    return presentation


@app.patch("/presentations/{presentation_id}", response_model=Presentation)
async def update_presentation(
    presentation_id: int,
    updates: PresentationUpdate,
    store: PresentationStore = Depends(get_presentation_store),
):
    """Replace the supplied top-level fields; slides and settings are replaced as a whole."""
    try:
        return await store.update_presentation(presentation_id, updates)
    except PresentationNotFoundError as e:
        raise HTTPException(status_code=e.status_code, detail="Presentation not found") from e


@app.post(
    "/presentations/{presentation_id}/slides/{slide_index}/reprompt",
    response_model=Presentation,
)
async def reprompt_slide(
    presentation_id: int,
    slide_index: int,
    request: RepromptRequest,
    store: PresentationStore = Depends(get_presentation_store),
    generation: OutlineGenerationService = Depends(get_generation_service),
):
    """Regenerate one slide in place.

    Generation runs without holding the presentation lock; the result is
    written against the current slides, so edits made meanwhile to other
    slides are kept. If the target slide was moved or removed in the
    meantime, nothing is written and the request fails with 400.
    """
    presentation = await store.get_presentation(presentation_id)
    if presentation is None:
        raise HTTPException(status_code=404, detail="Presentation not found")
    if not 0 <= slide_index < len(presentation.slides):
        raise HTTPException(status_code=400, detail="Invalid slide index")
    if not request.reprompt.strip():
        raise HTTPException(status_code=400, detail="Reprompt is required")

    try:
        updated_slide = await generation.reprompt_slide(
            presentation.slides[slide_index], request.reprompt, request.ai_model
        )
    except InvalidRequestError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e
    except GenerationError as e:
        logger.error(f"Error re-prompting slide: {e}")
        raise HTTPException(
            status_code=e.status_code, detail=f"Failed to re-prompt slide: {e!s}"
        ) from e

    def write_back(current: Presentation) -> dict:
        # The index must still address the slide that was regenerated
        in_bounds = 0 <= slide_index < len(current.slides)
        if not in_bounds or current.slides[slide_index].id != updated_slide.id:
            raise SlideIndexError(f"Slide {updated_slide.id} is no longer at index {slide_index}")
        return {"slides": replace_slide(current.slides, slide_index, updated_slide)}

    try:
        return await store.modify_presentation(presentation_id, write_back)
    except PresentationNotFoundError as e:
        raise HTTPException(status_code=e.status_code, detail="Presentation not found") from e
    except SlideIndexError as e:
        raise HTTPException(status_code=e.status_code, detail="Invalid slide index") from e


@app.post("/presentations/{presentation_id}/images", response_model=SlideImageRecord)
async def upload_slide_image(
    presentation_id: int,
    image: UploadFile | None = File(None),
    slide_index: str | None = Form(None, alias="slideIndex"),
    store: PresentationStore = Depends(get_presentation_store),
):
    """Store an uploaded image as a data URI record.

    The presentation's slides are not modified; attaching the URL to a slide
    is a separate PATCH with the full slides array.
    """
    if image is None:
        raise HTTPException(status_code=400, detail="No image file provided")
    data = await _read_upload(image)
    if not data:
        raise HTTPException(status_code=400, detail="Image file is empty")

    try:
        index = int(slide_index) if slide_index is not None else None
    except ValueError:
        index = None
    if index is None or index < 0:
        raise HTTPException(status_code=400, detail="A valid slideIndex is required")

    return await store.create_slide_image(
        SlideImageCreate(
            filename=sanitize_filename(image.filename or "image"),
            url=to_data_uri(data, image.content_type),
            slide_index=index,
            presentation_id=presentation_id,
        )
    )


@app.get("/presentations/{presentation_id}/images", response_model=list[SlideImageRecord])
async def list_slide_images(
    presentation_id: int, store: PresentationStore = Depends(get_presentation_store)
):
    return await store.get_slide_images_by_presentation_id(presentation_id)


@app.delete("/presentations/{presentation_id}/images/{image_id}", status_code=204)
async def delete_slide_image(
    presentation_id: int,
    image_id: int,
    store: PresentationStore = Depends(get_presentation_store),
):
    record = await store.get_slide_image(image_id)
    if record is None or record.presentation_id != presentation_id:
        raise HTTPException(status_code=404, detail="Slide image not found")
    await store.delete_slide_image(image_id)
    return Response(status_code=204)


@app.get("/presentations/{presentation_id}/documents", response_model=list[Document])
async def list_documents(
    presentation_id: int, store: PresentationStore = Depends(get_presentation_store)
):
    return await store.get_documents_by_presentation_id(presentation_id)


@app.post("/presentations/{presentation_id}/export", response_model=ExportResponse)
async def export_presentation(
    presentation_id: int,
    request: ExportRequest,
    store: PresentationStore = Depends(get_presentation_store),
):
    presentation = await store.get_presentation(presentation_id)
    if presentation is None:
        raise HTTPException(status_code=404, detail="Presentation not found")

    fmt = request.format.value
    prefix = config.get("api_prefix", "/api")
    return ExportResponse(
        message=f"Export to {fmt.upper()} initiated",
        download_url=f"{prefix}/presentations/{presentation_id}/download/{fmt}",
    )


if __name__ == "__main__":
    try:
        import uvicorn
    except ImportError as e:
        raise RuntimeError("uvicorn must be installed to run this service.") from e
    uvicorn.run(app, host="0.0.0.0", port=8000)
