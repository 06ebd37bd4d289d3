from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from textile_pos.core.errors import AssistantBusyError
from textile_pos.dependencies import get_assistant, get_chat_sessions, require_login
from textile_pos.schemas.assistant import ChatRequest, ChatResponse, ChatTurnRead, ImageAnalysisRead
from textile_pos.services.assistant_service import (
    AssistantClient,
    ChatSessionRegistry,
    analyze_image_for_display,
)

router = APIRouter(prefix="/assistant", tags=["Assistant"], dependencies=[Depends(require_login)])

_MAX_IMAGE_BYTES = 10 * 1024 * 1024


@router.post("/chat", response_model=ChatResponse)
def chat(
    payload: ChatRequest,
    client: AssistantClient = Depends(get_assistant),
    sessions: ChatSessionRegistry = Depends(get_chat_sessions),
):
    session = sessions.get_or_create(payload.session_id)
    try:
        reply = session.send(client, payload.message)
    except AssistantBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ChatResponse(
        session_id=session.id,
        reply=ChatTurnRead.model_validate(reply),
        turns=[ChatTurnRead.model_validate(turn) for turn in session.turns],
    )


@router.post("/analyze-image", response_model=ImageAnalysisRead)
def analyze_image(
    image: UploadFile = File(...),
    client: AssistantClient = Depends(get_assistant),
):
    mime_type = image.content_type or ""
    if not mime_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Upload must be an image.")
    data = image.file.read(_MAX_IMAGE_BYTES + 1)
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded image is empty.")
    if len(data) > _MAX_IMAGE_BYTES:
        raise HTTPException(status_code=413, detail="Image is too large.")
    return analyze_image_for_display(client, data, mime_type)


__all__ = ["router"]
