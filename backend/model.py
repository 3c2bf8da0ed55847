# backend/model.py
from pydantic import BaseModel
from typing import Optional


class ReferenceImage(BaseModel):
    content_type: str
    data: bytes


class GenerationRequest(BaseModel):
    # mode is kept as a plain string so unknown values reach the dispatcher
    mode: str
    prompt: str = ""
    duration: Optional[str] = None
    image: Optional[ReferenceImage] = None


class GenerateResponse(BaseModel):
    output: str


class ErrorResponse(BaseModel):
    error: str
