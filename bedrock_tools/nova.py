"""InvokeModel request/response shapes for the Amazon Nova text models.

Request schema:
    https://docs.aws.amazon.com/nova/latest/userguide/complete-request-schema.html

There is no published response schema; the parser follows observed replies::

    {"output": {"message": {"content": [{"text": "Hello!"}], "role": "assistant"}},
     "stopReason": "end_turn",
     "usage": {"inputTokens": 4, "outputTokens": 35, "totalTokens": 39}}
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from . import files
from .bedrock_client import invoke_model
from .config import NOVA_LITE_PROFILE_ID
from .files import DownloadLocation, FileReference, FileType, Location
from .mapping import InvalidPath, ResponseError

logger = logging.getLogger("bedrock_tools")


@dataclass
class InferenceConfig:
    max_new_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    stop_sequences: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return (
            self.max_new_tokens is None
            and self.temperature is None
            and self.top_p is None
            and self.top_k is None
            and not self.stop_sequences
        )

    def to_dict(self) -> Dict[str, Any]:
        cfg: Dict[str, Any] = {}
        if self.max_new_tokens is not None:
            cfg["max_new_tokens"] = self.max_new_tokens
        if self.temperature is not None:
            cfg["temperature"] = self.temperature
        if self.top_p is not None:
            cfg["top_p"] = self.top_p
        if self.top_k is not None:
            cfg["top_k"] = self.top_k
        if self.stop_sequences:
            cfg["stopSequences"] = list(self.stop_sequences)
        return cfg


def text_block(text: str) -> Dict[str, Any]:
    return {"text": text}


def image_block(path: str) -> Dict[str, Any]:
    return {"image": {"format": files.extension(path), "source": {"bytes": files.read_base64(path)}}}


def video_block(path: str) -> Dict[str, Any]:
    return {"video": {"format": files.extension(path), "source": {"bytes": files.read_base64(path)}}}


def s3_video_block(uri: str) -> Dict[str, Any]:
    # Cross-account buckets would also need "bucketOwner" here.
    fmt = FileReference.from_path(uri).extension
    return {"video": {"format": fmt, "source": {"s3Location": {"uri": uri}}}}


def build_request(
    prompt: str,
    system: Optional[str] = None,
    assistant: Optional[str] = None,
    images: Optional[List[str]] = None,
    videos: Optional[List[str]] = None,
    s3_videos: Optional[List[str]] = None,
    inference_config: Optional[InferenceConfig] = None,
) -> Dict[str, Any]:
    """Build the InvokeModel body.

    The user message comes first: prompt text, then images, local videos and
    S3 videos. An assistant prefill, when given, is the final message.
    """
    user_content: List[Dict[str, Any]] = [text_block(prompt)]
    for path in images or []:
        user_content.append(image_block(path))
    for path in videos or []:
        user_content.append(video_block(path))
    for uri in s3_videos or []:
        user_content.append(s3_video_block(uri))

    messages: List[Dict[str, Any]] = [{"role": "user", "content": user_content}]
    if assistant is not None:
        messages.append({"role": "assistant", "content": [text_block(assistant)]})

    body: Dict[str, Any] = {}
    if system is not None:
        body["system"] = [{"text": system}]
    body["messages"] = messages
    cfg = inference_config or InferenceConfig()
    if not cfg.is_empty():
        body["inferenceConfig"] = cfg.to_dict()
    return body


def build_request_from_references(
    prompt: str,
    attachments: List[FileReference],
    system: Optional[str] = None,
    assistant: Optional[str] = None,
    inference_config: Optional[InferenceConfig] = None,
) -> Dict[str, Any]:
    images: List[str] = []
    videos: List[str] = []
    s3_videos: List[str] = []
    for ref in attachments:
        if ref.file_type == FileType.IMAGE and ref.location == Location.LOCAL:
            images.append(ref.path)
        elif ref.file_type == FileType.VIDEO and ref.location == Location.LOCAL:
            videos.append(ref.path)
        elif ref.file_type == FileType.VIDEO and ref.location == Location.S3:
            s3_videos.append(ref.path)
        else:
            raise InvalidPath(ref.path)
    return build_request(
        prompt,
        system=system,
        assistant=assistant,
        images=images,
        videos=videos,
        s3_videos=s3_videos,
        inference_config=inference_config,
    )


def _load(body: str) -> Dict[str, Any]:
    try:
        rsp = json.loads(body)
    except json.JSONDecodeError as e:
        raise ResponseError(f"JSON was not well-formatted: {e}; body: {body}") from e
    if not isinstance(rsp, dict):
        raise ResponseError(f"expected a JSON object, body: {body}")
    return rsp


def parse_response(body: str) -> str:
    """Return the single text element of the assistant reply ('' when absent)."""
    rsp = _load(body)
    output = rsp.get("output") or {}
    if not isinstance(output, dict):
        raise ResponseError(f"expected an output object, body: {body}")
    msg = output.get("message") or {}
    if not isinstance(msg, dict):
        raise ResponseError(f"expected a message object, body: {body}")
    if msg.get("role") != "assistant":
        raise ResponseError(f"expected assistant role, got '{msg.get('role')}'")

    text: Optional[str] = None
    for content in msg.get("content") or []:
        if not isinstance(content, dict):
            raise ResponseError(f"unexpected content element: {content!r}")
        if "text" in content:
            if text is not None:
                raise ResponseError(f"content with multiple text elements: {body}")
            text = content["text"]
        elif "image" in content:
            raise ResponseError("nova doesn't support image output modality")
        elif "video" in content:
            raise ResponseError("nova doesn't support video output modality")
        else:
            raise ResponseError(f"unknown content block kind: {sorted(content)}")
    return text or ""


def generate_text(
    client,
    model_id: str,
    prompt: str,
    attachments: Optional[List[FileReference]] = None,
    system: Optional[str] = None,
    assistant: Optional[str] = None,
    inference_config: Optional[InferenceConfig] = None,
) -> Tuple[str, str]:
    """Invoke a Nova text model and return (trace_id, text)."""
    body = build_request_from_references(
        prompt, attachments or [], system=system, assistant=assistant, inference_config=inference_config
    )
    logger.debug("model-id: %s", model_id)
    result = invoke_model(client, model_id, body)
    logger.debug("%s", result.body)
    return result.request_id, parse_response(result.body)


class NovaLiteRequest:
    """Text-only Nova Lite request used by the `ask amzn-nova-lite` sub-command."""

    model_id = NOVA_LITE_PROFILE_ID

    def __init__(self, user: str, system: Optional[str] = None, assistant: Optional[str] = None):
        self.request = build_request(user, system=system, assistant=assistant)

    def body(self) -> Dict[str, Any]:
        return self.request

    def render_response(self, body: str, base_write_path: str) -> Tuple[str, List[DownloadLocation]]:
        # Text-only output, so nothing gets written under base_write_path.
        return parse_response(body), []
