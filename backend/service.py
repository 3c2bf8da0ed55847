# backend/service.py

import logging

from config.settings import settings

from .errors import ConfigurationError
from .input_builder import build_input
from .model import GenerationRequest
from .replicate_client import extract_output, get_replicate_client

logger = logging.getLogger(__name__)


async def run_generation(req: GenerationRequest) -> str:
    """
    Turn one generation request into one upstream call.
    Returns the media URL.
    """
    if not settings.REPLICATE_API_TOKEN:
        raise ConfigurationError("REPLICATE_API_TOKEN not configured")

    model_ref, model_input = build_input(req)
    logger.info("Generating mode=%s model=%s prompt=%.50s", req.mode, model_ref, req.prompt)

    client = get_replicate_client()
    output = await client.run(model_ref, model_input)
    return extract_output(output)
