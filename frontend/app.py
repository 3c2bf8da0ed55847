import os
import datetime
from io import BytesIO
from typing import Optional, Tuple

import requests
import streamlit as st
from PIL import Image

from frontend.controller import FormController, cached_media
from frontend.state import DURATIONS, ValidationError

BACKEND_URL = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")

MODE_LABELS = {
    "text-to-image": "Text → Image",
    "text-to-video": "Text → Video",
    "image-to-image": "Image → Image",
}

PLACEHOLDERS = {
    "text-to-image": "e.g., A photorealistic portrait of a woman in cinematic lighting",
    "text-to-video": "e.g., A realistic video of a woman walking forward naturally at night",
    "image-to-image": "e.g., Make it photorealistic, keep everything else the same",
}


def download_media(url: str, is_video: bool) -> Tuple[Optional[Image.Image], Optional[bytes]]:
    """Fetch the generated file. Images are also decoded with PIL for display."""
    try:
        resp = requests.get(url, timeout=60)
        resp.raise_for_status()
    except requests.RequestException as e:
        st.error(f"Could not download result: {e}")
        return None, None

    if is_video:
        return None, resp.content
    try:
        img = Image.open(BytesIO(resp.content)).convert("RGB")
    except OSError as e:
        st.error(f"Could not read image: {e}")
        return None, None
    return img, resp.content


# ==========================
# Page config
# ==========================
st.set_page_config(page_title="AI Visual Generator", page_icon="🎨", layout="centered")

st.title("AI Visual Generator")
st.caption("Generate high-quality images and videos with AI")

# ==========================
# State
# ==========================
if "controller" not in st.session_state:
    st.session_state["controller"] = FormController(backend_url=BACKEND_URL)
if "upload_key" not in st.session_state:
    st.session_state["upload_key"] = None

controller: FormController = st.session_state["controller"]

# ==========================
# Generation type
# ==========================
st.markdown("**Generation Type**")
cols = st.columns(len(MODE_LABELS))
for col, (mode, label) in zip(cols, MODE_LABELS.items()):
    with col:
        active = controller.state.mode == mode
        if st.button(label, key=f"mode_{mode}", type="primary" if active else "secondary",
                     use_container_width=True):
            controller.select_mode(mode)
            st.rerun()

mode = controller.state.mode

# ==========================
# Reference image
# ==========================
if mode == "image-to-image":
    uploaded = st.file_uploader("Upload Reference Image", type=["png", "jpg", "jpeg", "webp", "gif"])
    if uploaded is not None:
        key = (uploaded.name, uploaded.size)
        if st.session_state["upload_key"] != key:
            st.session_state["upload_key"] = key
            st.session_state["preview_future"] = controller.attach_image(
                uploaded.name, uploaded.type or "application/octet-stream", uploaded.getvalue()
            )

    future = st.session_state.get("preview_future")
    if controller.state.image is not None and controller.state.preview is None and future is not None:
        with st.spinner("Loading preview..."):
            future.result()
    if controller.state.preview:
        st.image(controller.state.preview, caption="Preview", width=320)

# ==========================
# Prompt & duration
# ==========================
prompt = st.text_area(
    "Modification Instructions" if mode == "image-to-image" else "Prompt",
    value=controller.state.prompt,
    placeholder=PLACEHOLDERS[mode],
    height=100,
)
controller.set_prompt(prompt)

if mode == "text-to-video":
    duration = st.selectbox(
        "Video Duration",
        DURATIONS,
        index=DURATIONS.index(controller.state.duration),
        format_func=lambda s: f"{s} seconds",
    )
    controller.set_duration(duration)

# ==========================
# Generate
# ==========================
clicked = st.button(
    "Generating..." if controller.state.loading else "Generate",
    disabled=controller.state.loading,
    type="primary",
    use_container_width=True,
)

if clicked:
    with st.spinner("Generating..."):
        try:
            controller.submit()
        except ValidationError:
            pass  # message is already in state.error

state = controller.state

if state.error:
    st.error(state.error)

# ==========================
# Result
# ==========================
if state.result:
    st.subheader("Result")
    is_video = state.result_mode == "text-to-video"
    image, data = cached_media(st.session_state, state.result, lambda url: download_media(url, is_video))

    if is_video:
        st.video(data or state.result, loop=True, autoplay=True)
    elif image is not None:
        st.image(image, use_container_width=True)

    if data:
        ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        st.download_button(
            "Download",
            data=data,
            file_name=f"generated_{ts}.{'mp4' if is_video else 'png'}",
            mime="video/mp4" if is_video else "image/png",
        )
    st.markdown(f"[Open original]({state.result})")
