"""Tests for mode -> model/input mapping"""
import base64
import os
import sys
import unittest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from backend.errors import ValidationError
from backend.input_builder import (
    FLUX_MODEL,
    LTX_VIDEO_MODEL,
    MODEL_TABLE,
    NEGATIVE_PROMPT,
    build_input,
    duration_to_frames,
    encode_data_url,
)
from backend.model import GenerationRequest, ReferenceImage


class TestDurationToFrames(unittest.TestCase):

    def test_enumerated_durations(self):
        for seconds, frames in ((10, 80), (20, 160), (30, 240), (60, 480)):
            self.assertEqual(duration_to_frames(str(seconds)), frames)

    def test_missing_or_invalid_defaults_to_thirty_seconds(self):
        for raw in (None, "", "abc", "0", "-5", "1.5", "20s"):
            self.assertEqual(duration_to_frames(raw), 240, raw)

    def test_surrounding_whitespace_is_ignored(self):
        self.assertEqual(duration_to_frames(" 20 "), 160)


class TestEncodeDataUrl(unittest.TestCase):

    def test_keeps_mime_type(self):
        url = encode_data_url(b"\xff\xd8\xff", "image/jpeg")
        self.assertTrue(url.startswith("data:image/jpeg;base64,"))
        self.assertEqual(base64.b64decode(url.split(",", 1)[1]), b"\xff\xd8\xff")

    def test_webp(self):
        self.assertTrue(encode_data_url(b"RIFF", "image/webp").startswith("data:image/webp;base64,"))


class TestBuildInput(unittest.TestCase):

    def test_table_covers_every_mode(self):
        self.assertEqual(set(MODEL_TABLE), {"text-to-image", "text-to-video", "image-to-image"})

    def test_text_to_image(self):
        model, inputs = build_input(GenerationRequest(mode="text-to-image", prompt="a red bicycle"))
        self.assertEqual(model, FLUX_MODEL)
        self.assertEqual(inputs, {
            "prompt": "a red bicycle",
            "aspect_ratio": "16:9",
            "output_format": "png",
            "output_quality": 100,
        })

    def test_text_to_video(self):
        model, inputs = build_input(
            GenerationRequest(mode="text-to-video", prompt="ocean waves", duration="20")
        )
        self.assertEqual(model, LTX_VIDEO_MODEL)
        self.assertEqual(inputs, {
            "prompt": "ocean waves",
            "num_frames": 160,
            "aspect_ratio": "16:9",
            "negative_prompt": NEGATIVE_PROMPT,
        })

    def test_text_to_video_ignores_image(self):
        req = GenerationRequest(
            mode="text-to-video",
            prompt="ocean waves",
            image=ReferenceImage(content_type="image/png", data=b"png"),
        )
        _, inputs = build_input(req)
        self.assertNotIn("image", inputs)
        self.assertEqual(inputs["num_frames"], 240)

    def test_image_to_image(self):
        req = GenerationRequest(
            mode="image-to-image",
            prompt="make it night",
            image=ReferenceImage(content_type="image/png", data=b"\x89PNG"),
        )
        model, inputs = build_input(req)
        self.assertEqual(model, FLUX_MODEL)
        self.assertEqual(inputs["image"], "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode())
        self.assertEqual(inputs["prompt_strength"], 0.8)
        self.assertEqual(inputs["aspect_ratio"], "16:9")
        self.assertEqual(inputs["output_format"], "png")
        self.assertEqual(inputs["output_quality"], 100)

    def test_image_to_image_requires_image(self):
        with self.assertRaises(ValidationError) as ctx:
            build_input(GenerationRequest(mode="image-to-image", prompt="make it night"))
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertIn("Image file is required", ctx.exception.message)

    def test_unknown_mode_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            build_input(GenerationRequest(mode="text-to-audio", prompt="hum"))
        self.assertIn("text-to-audio", ctx.exception.message)

    def test_defaults_are_not_shared_between_calls(self):
        _, first = build_input(GenerationRequest(mode="text-to-image", prompt="a"))
        first["aspect_ratio"] = "1:1"
        _, second = build_input(GenerationRequest(mode="text-to-image", prompt="b"))
        self.assertEqual(second["aspect_ratio"], "16:9")


if __name__ == '__main__':
    unittest.main()
