"""
Form state for the generator page.

FormState is immutable. Every change goes through update(state, action),
which returns a new state. The controller and the Streamlit page never
mutate fields directly.
"""

from typing import Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict

Mode = Literal["text-to-image", "text-to-video", "image-to-image"]

MODES = get_args(Mode)
DURATIONS = (10, 20, 30, 60)
DEFAULT_DURATION = 30


class ValidationError(Exception):
    """Form input is missing or out of range. No request was sent."""


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ImageAttachment(_Frozen):
    upload_id: str
    name: str
    content_type: str
    data: bytes


class FormState(_Frozen):
    mode: Mode = "text-to-image"
    prompt: str = ""
    duration: int = DEFAULT_DURATION
    image: Optional[ImageAttachment] = None
    preview: Optional[str] = None
    loading: bool = False
    result: Optional[str] = None
    result_mode: Optional[Mode] = None
    error: str = ""

    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        if self.error:
            return "error"
        if self.result:
            return "done"
        return "idle"


# ==========================
# Actions
# ==========================
class SelectMode(_Frozen):
    mode: Mode


class SetPrompt(_Frozen):
    text: str


class SetDuration(_Frozen):
    seconds: int


class AttachImage(_Frozen):
    image: ImageAttachment


class PreviewReady(_Frozen):
    upload_id: str
    preview: str


class ValidationFailed(_Frozen):
    error: str


class SubmitStarted(_Frozen):
    pass


class SubmitSucceeded(_Frozen):
    output: str


class SubmitFailed(_Frozen):
    error: str


Action = Union[
    SelectMode,
    SetPrompt,
    SetDuration,
    AttachImage,
    PreviewReady,
    ValidationFailed,
    SubmitStarted,
    SubmitSucceeded,
    SubmitFailed,
]


def update(state: FormState, action: Action) -> FormState:
    """Apply one action and return the next state."""
    if isinstance(action, SelectMode):
        # prompt and image survive a mode switch
        return state.model_copy(update={"mode": action.mode})

    if isinstance(action, SetPrompt):
        return state.model_copy(update={"prompt": action.text})

    if isinstance(action, SetDuration):
        return state.model_copy(update={"duration": action.seconds})

    if isinstance(action, AttachImage):
        return state.model_copy(update={"image": action.image, "preview": None})

    if isinstance(action, PreviewReady):
        # a preview for an image that was since replaced is dropped
        if state.image is None or state.image.upload_id != action.upload_id:
            return state
        return state.model_copy(update={"preview": action.preview})

    if isinstance(action, ValidationFailed):
        return state.model_copy(update={"error": action.error})

    if isinstance(action, SubmitStarted):
        return state.model_copy(update={"loading": True, "error": "", "result": None, "result_mode": state.mode})

    if isinstance(action, SubmitSucceeded):
        return state.model_copy(update={"loading": False, "result": action.output, "error": ""})

    if isinstance(action, SubmitFailed):
        return state.model_copy(update={"loading": False, "error": action.error})

    raise TypeError(f"Unknown action: {action!r}")


def validate_submission(state: FormState) -> None:
    """Raise ValidationError if the current mode is missing a required field."""
    if state.mode != "image-to-image" and not state.prompt.strip():
        raise ValidationError("prompt required")
    if state.mode == "image-to-image" and state.image is None:
        raise ValidationError("image required")
