# AI Core Module - LLM access and telemetry

from acadboost.ai.core.llm import LLMClient, LLMResponse, get_llm_client, strip_code_fences
from acadboost.ai.core.telemetry import get_tracer, init_telemetry, service_span

__all__ = [
    # LLM
    "LLMClient", "LLMResponse", "get_llm_client", "strip_code_fences",
    # Telemetry
    "get_tracer", "init_telemetry", "service_span",
]
