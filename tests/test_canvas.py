import base64
import io
import json

import pytest

from bedrock_tools.canvas import (
    build_request,
    parse_response,
    redact_body,
    save_images,
    text_to_image,
)
from bedrock_tools.mapping import ResponseError


class FakeClient:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def invoke_model(self, **kwargs):
        self.calls.append(kwargs)
        return {
            "body": io.BytesIO(json.dumps(self.payload).encode()),
            "ResponseMetadata": {"RequestId": "r-42"},
        }


def test_request_shape():
    assert build_request("a lake") == {"taskType": "TEXT_IMAGE", "textToImageParams": {"text": "a lake"}}
    body = build_request("a lake", "birds, ducks")
    assert body["textToImageParams"]["negativeText"] == "birds, ducks"
    assert "imageGenerationConfig" not in body


def test_parse_response():
    rsp = parse_response(json.dumps({"images": ["aGk="], "error": None}))
    assert rsp.images == ["aGk="]
    assert rsp.error is None
    with pytest.raises(ResponseError):
        parse_response("{")
    with pytest.raises(ResponseError):
        parse_response(json.dumps({"images": [1, 2]}))


def test_save_images(tmp_path):
    images = [base64.b64encode(b"one").decode(), base64.b64encode(b"two").decode()]
    paths = save_images(images, str(tmp_path / "req-"))
    assert paths == [str(tmp_path / "req-0.png"), str(tmp_path / "req-1.png")]
    assert (tmp_path / "req-1.png").read_bytes() == b"two"


def test_redact_body():
    body = "a" * 50 + "b" * 100 + "c" * 50
    assert redact_body(body) == f"len: 200\n{'a' * 50} ... {'c' * 50}"
    assert redact_body("short") == "len: 5\nshort"


def test_text_to_image():
    client = FakeClient({"images": ["aGk="]})
    trace_id, images = text_to_image(client, "a cat", "dogs")
    assert trace_id == "r-42"
    assert images == ["aGk="]
    assert client.calls[0]["modelId"] == "amazon.nova-canvas-v1:0"


def test_text_to_image_error():
    client = FakeClient({"images": [], "error": "content filtered"})
    with pytest.raises(ResponseError, match="content filtered"):
        text_to_image(client, "a cat")
