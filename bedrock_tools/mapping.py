from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from . import files
from .files import FileReference, FileType, Location


class MappingError(Exception):
    pass


class InvalidPath(MappingError):
    def __init__(self, path: str):
        super().__init__(f"invalid attachment path: {path}")
        self.path = path


class ResponseError(MappingError):
    pass


class ToolSpecError(MappingError):
    pass


# Converse uses the SDK enum spelling, not the raw extension.
_IMAGE_FORMATS = {"gif": "gif", "jpeg": "jpeg", "jpg": "jpeg", "png": "png", "webp": "webp"}
_VIDEO_FORMATS = {
    "flv": "flv",
    "mkv": "mkv",
    "mov": "mov",
    "mp4": "mp4",
    "mpg": "mpg",
    "mpeg": "mpeg",
    "3gp": "three_gp",
    "webm": "webm",
    "wmv": "wmv",
}
_DOCUMENT_FORMATS = {ext: ext for ext in ("csv", "doc", "docx", "html", "md", "pdf", "txt", "xls", "xlsx")}


def _sanitize_media_name(value: str, fallback: str) -> str:
    # Bedrock document names allow alphanumerics, single spaces, hyphens, parentheses and brackets.
    def _clean(raw: str) -> str:
        cleaned_chars: List[str] = []
        prev_space = False
        for ch in raw:
            if ch.isalnum() or ch in "-()[]":
                cleaned_chars.append(ch)
                prev_space = False
            elif not prev_space:
                cleaned_chars.append(" ")
                prev_space = True
        return "".join(cleaned_chars).strip()

    for candidate in (value, fallback):
        if candidate:
            cleaned = _clean(candidate)
            if cleaned:
                return cleaned
    return fallback or "document"


def attachment_to_content_block(path: str) -> Dict[str, Any]:
    """Turn a local path or s3:// uri into a Converse content block.

    Raises InvalidPath for unsupported extensions, or for S3 media that is not video.
    """
    ref = FileReference.from_path(path)
    ext = ref.extension.lower()

    if ref.file_type == FileType.IMAGE and ref.location == Location.LOCAL:
        return {"image": {"format": _IMAGE_FORMATS[ext], "source": {"bytes": files.read_bytes(ref.path)}}}

    if ref.file_type == FileType.VIDEO:
        fmt = _VIDEO_FORMATS[ext]
        if ref.location == Location.S3:
            return {"video": {"format": fmt, "source": {"s3Location": {"uri": ref.path}}}}
        return {"video": {"format": fmt, "source": {"bytes": files.read_bytes(ref.path)}}}

    if ref.file_type == FileType.DOCUMENT and ref.location == Location.LOCAL:
        return {
            "document": {
                "format": _DOCUMENT_FORMATS[ext],
                "name": _sanitize_media_name(ref.stem, f"document {ext.upper()}"),
                "source": {"bytes": files.read_bytes(ref.path)},
            }
        }

    raise InvalidPath(path)


def build_user_message(prompt: str, attachments: List[str]) -> Dict[str, Any]:
    content: List[Dict[str, Any]] = [{"text": prompt}]
    for path in attachments:
        content.append(attachment_to_content_block(path))
    return {"role": "user", "content": content}


def map_system(system: Optional[str]) -> Optional[List[Dict[str, str]]]:
    if not system:
        return None
    return [{"text": system}]


def map_inference_config(
    max_tokens: Optional[int] = None,
    temperature: Optional[float] = None,
    top_p: Optional[float] = None,
    stop_sequences: Optional[List[str]] = None,
) -> Optional[Dict[str, Any]]:
    cfg: Dict[str, Any] = {}
    if max_tokens is not None:
        cfg["maxTokens"] = max_tokens
    if temperature is not None:
        cfg["temperature"] = temperature
    if top_p is not None:
        cfg["topP"] = top_p
    if stop_sequences:
        cfg["stopSequences"] = list(stop_sequences)
    return cfg or None


class ToolArgType(Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "number"
    BOOL = "boolean"
    ARRAY = "array"


@dataclass
class ToolArg:
    name: str
    description: str
    arg_type: ToolArgType
    is_mandatory: bool = True


def make_tool(name: str, description: str, inputs: List[ToolArg]) -> Dict[str, Any]:
    """Build a Converse toolConfig holding a single tool.

    The JSON schema is wrapped in {"json": ...} as the Converse inputSchema expects.
    """
    if not name:
        raise ToolSpecError("tool name is required")
    properties: Dict[str, Any] = {}
    required: List[str] = []
    for arg in inputs:
        if arg.name in properties:
            raise ToolSpecError(f"duplicate tool argument: {arg.name}")
        properties[arg.name] = {"type": arg.arg_type.value, "description": arg.description}
        if arg.is_mandatory:
            required.append(arg.name)
    schema = {"type": "object", "properties": properties, "required": required}
    return {
        "tools": [
            {
                "toolSpec": {
                    "name": name,
                    "description": description,
                    "inputSchema": {"json": schema},
                }
            }
        ]
    }


_PLACEHOLDERS = {
    "image": "-- image --",
    "video": "-- video --",
    "document": "-- document --",
    "toolUse": "-- tool use --",
    "toolResult": "-- tool result --",
    "guardContent": "-- guardrail --",
    "reasoningContent": "-- reasoning --",
}


def render_content_block(block: Dict[str, Any]) -> str:
    if "text" in block:
        return block.get("text", "")
    for key, placeholder in _PLACEHOLDERS.items():
        if key in block:
            return placeholder
    raise ResponseError(f"unknown response content block: {sorted(block.keys())}")


def output_message(resp: Dict[str, Any]) -> Dict[str, Any]:
    msg = (resp.get("output") or {}).get("message")
    if not msg:
        raise ResponseError("converse response had no output message")
    if msg.get("role") != "assistant":
        raise ResponseError(f"expected assistant role, got '{msg.get('role')}'")
    return msg
