"""InvokeModel request/response shapes for Amazon Nova Canvas text-to-image.

https://docs.aws.amazon.com/nova/latest/userguide/image-gen-req-resp-structure.html
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from . import files
from .bedrock_client import invoke_model
from .config import CANVAS_MODEL_ID
from .mapping import ResponseError

logger = logging.getLogger("bedrock_tools")

TEXT_IMAGE = "TEXT_IMAGE"


@dataclass
class CanvasResponse:
    images: List[str] = field(default_factory=list)
    error: Optional[str] = None


def build_request(prompt: str, negative: Optional[str] = None) -> Dict[str, Any]:
    params: Dict[str, Any] = {"text": prompt}
    if negative:
        params["negativeText"] = negative
    return {"taskType": TEXT_IMAGE, "textToImageParams": params}


def parse_response(body: str) -> CanvasResponse:
    try:
        rsp = json.loads(body)
    except json.JSONDecodeError as e:
        raise ResponseError(f"JSON was not well-formatted: {e}") from e
    if not isinstance(rsp, dict):
        raise ResponseError("expected a JSON object from canvas")
    images = rsp.get("images") or []
    if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
        raise ResponseError("canvas 'images' must be a list of base64 strings")
    return CanvasResponse(images=images, error=rsp.get("error"))


def redact_body(body: str, keep: int = 50) -> str:
    """Short preview of a (usually huge) base64-laden body."""
    if len(body) <= keep * 2:
        return f"len: {len(body)}\n{body}"
    return f"len: {len(body)}\n{body[:keep]} ... {body[-keep:]}"


def save_images(images: List[str], base_path: str) -> List[str]:
    """Write each image to `<base_path><idx>.png`.

    base_path may end in a filename prefix, e.g. `/tmp/abc123-`.
    """
    paths: List[str] = []
    for idx, image in enumerate(images):
        path = f"{base_path}{idx}.png"
        files.write_base64(path, image)
        paths.append(path)
    return paths


def text_to_image(client, prompt: str, negative: Optional[str] = None) -> Tuple[str, List[str]]:
    """Generate images and return (trace_id, base64 images)."""
    body = build_request(prompt, negative)
    logger.debug("model-id: %s", CANVAS_MODEL_ID)
    logger.debug("%s", json.dumps(body))
    result = invoke_model(client, CANVAS_MODEL_ID, body)
    logger.debug("%s", redact_body(result.body))
    rsp = parse_response(result.body)
    if rsp.error:
        raise ResponseError(f"canvas returned an error: {rsp.error}")
    return result.request_id, rsp.images
