import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import boto3

logger = logging.getLogger("bedrock_tools")


@dataclass
class InvokeResult:
    request_id: str
    body: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def get_session(profile: Optional[str] = None, region: Optional[str] = None):
    """Build a boto3 session.

    Credentials and region come from, in order: the explicit profile, the
    AWS_* environment variables, then the default profile in ~/.aws.
    """
    kwargs: Dict[str, Any] = {}
    if profile:
        kwargs["profile_name"] = profile
    if region:
        kwargs["region_name"] = region
    return boto3.Session(**kwargs)


def get_runtime_client(profile: Optional[str] = None, region: Optional[str] = None):
    return get_session(profile, region).client("bedrock-runtime")


def get_control_client(profile: Optional[str] = None, region: Optional[str] = None):
    return get_session(profile, region).client("bedrock")


def invoke_model(client, model_id: str, body: Dict[str, Any]) -> InvokeResult:
    """Send an InvokeModel request with a JSON body and read the reply body."""
    logger.debug("Calling Bedrock invoke_model: modelId=%s", model_id)
    resp = client.invoke_model(
        modelId=model_id,
        contentType="application/json",
        accept="application/json",
        body=json.dumps(body),
    )
    raw = resp["body"].read()
    text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else str(raw)
    metadata = resp.get("ResponseMetadata") or {}
    return InvokeResult(
        request_id=metadata.get("RequestId") or "UNKNOWN",
        body=text,
        metadata=metadata,
    )


def converse(client, **kwargs) -> Dict[str, Any]:
    """Thin wrapper over client.converse.

    kwargs should include keys like modelId, messages, system, toolConfig and inferenceConfig.
    """
    logger.debug("Calling Bedrock converse: modelId=%s", kwargs.get("modelId"))
    return client.converse(**{k: v for k, v in kwargs.items() if v is not None})


def list_models(client, provider: Optional[str] = None) -> List[str]:
    resp = client.list_foundation_models()
    models = resp.get("modelSummaries") or []
    wanted = provider.lower() if provider else None
    ids: List[str] = []
    for m in models:
        if wanted is not None and (m.get("providerName") or "").lower() != wanted:
            continue
        mid = m.get("modelId")
        if isinstance(mid, str):
            ids.append(mid)
    return ids
