"""Outbound request pipeline.

Stages wrap the single outbound call made per inbound request:

- LoggingStage: request/response metadata and timing, credentials never logged
- ApiKeyStage: attaches the upstream credential as the `key` query parameter

Usage:
    from weatherproxy.pipeline import ApiKeyStage, LoggingStage, PipelineTransport

    transport = PipelineTransport([LoggingStage(), ApiKeyStage(lambda: api_key)])
    client = httpx.AsyncClient(base_url=..., transport=transport)
"""

from weatherproxy.pipeline.api_key import API_KEY_PARAM, ApiKeyStage, with_query_param
from weatherproxy.pipeline.chain import (
    FunctionStage,
    PipelineError,
    PipelineTransport,
    Send,
    Stage,
    StageChain,
    build_chain,
)
from weatherproxy.pipeline.request_logging import LoggingStage

__all__ = [
    # Chain
    "Stage",
    "FunctionStage",
    "StageChain",
    "PipelineTransport",
    "PipelineError",
    "Send",
    "build_chain",
    # Stages
    "ApiKeyStage",
    "LoggingStage",
    "API_KEY_PARAM",
    "with_query_param",
]
