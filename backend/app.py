# backend/app.py

import logging
from typing import Annotated, Optional

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse

from config.settings import settings
from .errors import GenerationError
from .model import ErrorResponse, GenerateResponse, GenerationRequest, ReferenceImage
from .service import run_generation

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="AI Visual Generator")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.post(
    "/api/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate(
    mode: Annotated[str, Form(alias="type")] = "",
    prompt: Annotated[str, Form()] = "",
    duration: Annotated[Optional[str], Form()] = None,
    image: Annotated[Optional[UploadFile], File()] = None,
):
    try:
        reference = None
        if image is not None:
            reference = ReferenceImage(content_type=image.content_type or "", data=await image.read())

        req = GenerationRequest(mode=mode, prompt=prompt, duration=duration, image=reference)
        output = await run_generation(req)
        return GenerateResponse(output=output)

    except GenerationError as e:
        if e.status_code >= 500:
            logger.error("Generation error: %s", e.message)
        else:
            logger.info("Rejected request: %s", e.message)
        return _error(e.status_code, e.message or "Generation failed")

    except Exception as e:
        logger.exception("Generation error")
        return _error(500, str(e) or "Generation failed")
