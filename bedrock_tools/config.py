import json
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional

__version__ = "0.1.0"

NOVA_LITE_PROFILE_ID = "us.amazon.nova-lite-v1:0"
CANVAS_MODEL_ID = "amazon.nova-canvas-v1:0"
CLAUDE_SONNET_PROFILE_ID = "us.anthropic.claude-3-5-sonnet-20241022-v2:0"

# Nova text models are only reachable through cross-region inference profiles.
_BUILTIN_ALIASES: Dict[str, str] = {
    "micro": "us.amazon.nova-micro-v1:0",
    "lite": NOVA_LITE_PROFILE_ID,
    "pro": "us.amazon.nova-pro-v1:0",
    "sonnet": CLAUDE_SONNET_PROFILE_ID,
}


@dataclass
class Settings:
    aws_region: Optional[str]
    nova_model_id: str
    converse_model_id: str
    model_id_map: Dict[str, str]
    log_file: Optional[str]


def _load_model_id_map() -> Dict[str, str]:
    raw = os.getenv("BEDROCK_MODEL_ID_MAP_JSON", "").strip()
    if not raw:
        return {}
    # Allow @path to load from file
    if raw.startswith("@"):
        path = os.path.expanduser(raw[1:])
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        # Fallback: alias pairs like lite=us.amazon.nova-lite-v1:0;big=...
        mapping: Dict[str, str] = {}
        for pair in raw.split(";"):
            if not pair:
                continue
            if "=" in pair:
                k, v = pair.split("=", 1)
                mapping[k.strip()] = v.strip()
        return mapping


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # None lets boto3 resolve the region from the profile or its own env chain.
    region = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or None
    return Settings(
        aws_region=region,
        nova_model_id=os.getenv("BEDROCK_NOVA_MODEL_ID") or NOVA_LITE_PROFILE_ID,
        converse_model_id=os.getenv("BEDROCK_CONVERSE_MODEL_ID") or CLAUDE_SONNET_PROFILE_ID,
        model_id_map=_load_model_id_map(),
        log_file=os.getenv("BEDROCK_TOOLS_LOG_FILE") or None,
    )


def resolve_model_id(requested_model: str) -> str:
    """Map a short alias to a Bedrock modelId or inference profile id.

    Unknown names are passed through untouched so full ids always work.
    """
    if not requested_model:
        raise ValueError("model is required")
    m = get_settings().model_id_map.get(requested_model)
    if m:
        return m
    return _BUILTIN_ALIASES.get(requested_model.lower(), requested_model)
