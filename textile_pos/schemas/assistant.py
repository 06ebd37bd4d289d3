from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    session_id: Optional[str] = None


class ChatTurnRead(BaseModel):
    id: str
    role: str
    text: str
    timestamp: datetime
    is_error: bool = False

    model_config = ConfigDict(from_attributes=True)


class ChatResponse(BaseModel):
    session_id: str
    reply: ChatTurnRead
    turns: List[ChatTurnRead]


class ImageAnalysisRead(BaseModel):
    result: str
    is_error: bool
