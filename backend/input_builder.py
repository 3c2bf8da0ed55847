# backend/input_builder.py

import base64
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .errors import ValidationError
from .model import GenerationRequest


FLUX_MODEL = "black-forest-labs/flux-1.1-pro"
LTX_VIDEO_MODEL = (
    "lightricks/ltx-video:"
    "03b88e6afdce86d3d93fb9826a9c33b891d81b7a0fc95dd3e5ae5d9aef22b82b"
)

FRAMES_PER_SECOND = 8
DEFAULT_DURATION = 30
NEGATIVE_PROMPT = "worst quality, low quality, blurry, distorted, artifacts"


def parse_duration(raw: Optional[str]) -> int:
    """
    Parse the duration form field in seconds.
    Missing, non-integer or non-positive values fall back to DEFAULT_DURATION.
    """
    if raw is None:
        return DEFAULT_DURATION
    try:
        value = int(raw.strip())
    except ValueError:
        return DEFAULT_DURATION
    if value <= 0:
        return DEFAULT_DURATION
    return value


def duration_to_frames(raw: Optional[str]) -> int:
    return parse_duration(raw) * FRAMES_PER_SECOND


def encode_data_url(data: bytes, content_type: Optional[str]) -> str:
    """Encode raw image bytes as a data URL, keeping the uploaded MIME type."""
    mime = content_type or "application/octet-stream"
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def _video_inputs(req: GenerationRequest) -> Dict[str, Any]:
    return {"num_frames": duration_to_frames(req.duration)}


def _reference_image_inputs(req: GenerationRequest) -> Dict[str, Any]:
    if req.image is None:
        raise ValidationError("Image file is required for image-to-image generation")
    return {"image": encode_data_url(req.image.data, req.image.content_type)}


@dataclass(frozen=True)
class ModelSpec:
    """
    One row of the dispatch table:
    - model_ref: Replicate model, "owner/name" or "owner/name:version"
    - defaults: fixed inputs sent with every request
    - extra: builds request-dependent inputs (frames, reference image, ...)
    """
    model_ref: str
    defaults: Dict[str, Any] = field(default_factory=dict)
    extra: Optional[Callable[[GenerationRequest], Dict[str, Any]]] = None


MODEL_TABLE: Dict[str, ModelSpec] = {
    "text-to-image": ModelSpec(
        model_ref=FLUX_MODEL,
        defaults={
            "aspect_ratio": "16:9",
            "output_format": "png",
            "output_quality": 100,
        },
    ),
    "text-to-video": ModelSpec(
        model_ref=LTX_VIDEO_MODEL,
        defaults={
            "aspect_ratio": "16:9",
            "negative_prompt": NEGATIVE_PROMPT,
        },
        extra=_video_inputs,
    ),
    "image-to-image": ModelSpec(
        model_ref=FLUX_MODEL,
        defaults={
            "prompt_strength": 0.8,
            "aspect_ratio": "16:9",
            "output_format": "png",
            "output_quality": 100,
        },
        extra=_reference_image_inputs,
    ),
}


def build_input(req: GenerationRequest) -> tuple[str, Dict[str, Any]]:
    """
    Resolve the upstream model and input object for a request.
    Returns (model_ref, input). Raises ValidationError for an unknown mode
    or a missing reference image.
    """
    spec = MODEL_TABLE.get(req.mode)
    if spec is None:
        raise ValidationError(f"Unsupported generation type: {req.mode or '(empty)'}")

    inputs: Dict[str, Any] = {"prompt": req.prompt}
    if spec.extra is not None:
        inputs.update(spec.extra(req))
    inputs.update(spec.defaults)
    return spec.model_ref, inputs
