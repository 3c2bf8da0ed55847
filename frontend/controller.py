import base64
import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, MutableMapping, Optional, Tuple

import requests

from .state import (
    DURATIONS,
    MODES,
    Action,
    AttachImage,
    FormState,
    ImageAttachment,
    PreviewReady,
    SelectMode,
    SetDuration,
    SetPrompt,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    ValidationError,
    ValidationFailed,
    update,
    validate_submission,
)

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate"

# one pool for all sessions
_preview_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="preview")


def make_preview(image: ImageAttachment) -> str:
    """data: URL for showing the attached image before upload."""
    encoded = base64.b64encode(image.data).decode("ascii")
    return f"data:{image.content_type};base64,{encoded}"


def build_payload(state: FormState) -> Tuple[Dict[str, str], Optional[Dict[str, Any]]]:
    """
    Multipart fields for POST /api/generate.
    duration only for text-to-video, the image part only for image-to-image.
    """
    data = {"type": state.mode, "prompt": state.prompt}
    if state.mode == "text-to-video":
        data["duration"] = str(state.duration)

    files = None
    if state.mode == "image-to-image" and state.image is not None:
        files = {"image": (state.image.name, state.image.data, state.image.content_type)}
    return data, files


def cached_media(cache: MutableMapping[str, Any], url: str, fetch: Callable[[str], Any]) -> Any:
    """Fetch the result for url once; reruns with the same result reuse it."""
    entry = cache.get("media")
    if entry is None or entry[0] != url:
        entry = (url, fetch(url))
        cache["media"] = entry
    return entry[1]


class FormController:
    """
    Holds the form state and talks to the backend.
    All state changes go through dispatch() -> update().
    """

    def __init__(
        self,
        backend_url: str = "http://127.0.0.1:8000",
        post: Callable[..., requests.Response] = requests.post,
        timeout: Optional[float] = None,
    ):
        self.backend_url = backend_url.rstrip("/")
        self._post = post
        self._timeout = timeout
        self._state = FormState()
        self._lock = threading.Lock()

    @property
    def state(self) -> FormState:
        return self._state

    def dispatch(self, action: Action) -> FormState:
        with self._lock:
            self._state = update(self._state, action)
            return self._state

    def select_mode(self, mode: str) -> FormState:
        if mode not in MODES:
            raise ValidationError(f"unknown mode: {mode}")
        return self.dispatch(SelectMode(mode=mode))

    def set_prompt(self, text: str) -> FormState:
        return self.dispatch(SetPrompt(text=text))

    def set_duration(self, seconds: int) -> FormState:
        if seconds not in DURATIONS:
            raise ValidationError(f"duration must be one of {DURATIONS}")
        return self.dispatch(SetDuration(seconds=seconds))

    def attach_image(self, name: str, content_type: str, data: bytes) -> Future:
        """
        Store the image and build its preview in the background.
        The returned future resolves to the state after the preview landed.
        """
        image = ImageAttachment(
            upload_id=uuid.uuid4().hex,
            name=name,
            content_type=content_type,
            data=data,
        )
        self.dispatch(AttachImage(image=image))

        def _build() -> FormState:
            preview = make_preview(image)
            return self.dispatch(PreviewReady(upload_id=image.upload_id, preview=preview))

        return _preview_executor.submit(_build)

    def submit(self) -> FormState:
        """
        Validate and send one generation request.
        Raises ValidationError without touching the network if a field is missing.
        While a request is in flight further calls are ignored.
        """
        with self._lock:
            if self._state.loading:
                logger.warning("Submit ignored, a request is already in flight")
                return self._state
            try:
                validate_submission(self._state)
            except ValidationError as e:
                self._state = update(self._state, ValidationFailed(error=str(e)))
                raise
            snapshot = self._state
            self._state = update(self._state, SubmitStarted())

        try:
            action = self._send(snapshot)
        except requests.RequestException as e:
            logger.error("Request to backend failed: %s", e)
            action = SubmitFailed(error=str(e) or "An error occurred")
        except Exception as e:
            logger.exception("Submit failed")
            action = SubmitFailed(error=str(e) or "An error occurred")
        return self.dispatch(action)

    def _send(self, snapshot: FormState) -> Action:
        """POST the form and turn the response into the closing action."""
        data, files = build_payload(snapshot)
        logger.info("Submitting %s request", snapshot.mode)

        resp = self._post(
            f"{self.backend_url}{GENERATE_PATH}",
            data=data,
            files=files,
            timeout=self._timeout,
        )

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not resp.ok:
            return SubmitFailed(error=str(body.get("error") or "Generation failed"))

        output = body.get("output")
        if not output:
            return SubmitFailed(error="Generation failed")
        return SubmitSucceeded(output=output)
