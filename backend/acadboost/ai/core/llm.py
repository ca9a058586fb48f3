"""
AcadBoost - Unified LLM Client
Centralized LLM access with telemetry and timeouts.
"""
import json
from typing import Optional, Any
from dataclasses import dataclass

from langchain_core.messages import HumanMessage, SystemMessage

from acadboost.core.config import settings
from acadboost.ai.core.telemetry import get_tracer, trace_llm_call


@dataclass
class LLMResponse:
    """Standardized response from LLM client."""
    content: str
    model: str
    tokens_prompt: int = 0
    tokens_completion: int = 0
    tokens_total: int = 0
    raw_response: Any = None


def strip_code_fences(content: str) -> str:
    """Remove a surrounding ```json ... ``` block if present."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


class LLMClient:
    """
    Unified LLM Client.

    Features:
    - Multi-provider support (OpenAI, Anthropic)
    - Built-in telemetry (OpenTelemetry)
    - Provider-level retries and request timeout
    - Token usage tracking
    """

    def __init__(
        self,
        provider: str = None,
        model: str = None,
        temperature: float = None,
        timeout: int = None,
        max_retries: int = None,
    ):
        """
        Initialize the LLM client.

        Args:
            provider: LLM provider ('openai' or 'anthropic'). Defaults to settings.
            model: Model name. Defaults to settings.
            temperature: Sampling temperature.
            timeout: Request timeout in seconds.
            max_retries: Provider-level retry count.
        """
        self.provider = provider or settings.LLM_PROVIDER
        self.model = model or (
            settings.OPENAI_MODEL if self.provider == "openai"
            else settings.ANTHROPIC_MODEL
        )
        self.temperature = settings.LLM_TEMPERATURE if temperature is None else temperature
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS
        self.max_retries = settings.LLM_MAX_RETRIES if max_retries is None else max_retries

        self._llm = None

    @property
    def llm(self):
        """Lazy-load the LLM instance."""
        if self._llm is None:
            if self.provider == "openai":
                from langchain_openai import ChatOpenAI
                self._llm = ChatOpenAI(
                    model=self.model,
                    api_key=settings.OPENAI_API_KEY,
                    temperature=self.temperature,
                    timeout=self.timeout,
                    max_retries=self.max_retries,
                )
            else:
                from langchain_anthropic import ChatAnthropic
                self._llm = ChatAnthropic(
                    model=self.model,
                    api_key=settings.ANTHROPIC_API_KEY,
                    temperature=self.temperature,
                    timeout=self.timeout,
                    max_retries=self.max_retries,
                )
        return self._llm

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        caller: str = "LLMClient",
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            prompt: The user prompt.
            system_prompt: Optional system prompt.
            caller: Name of the calling component (for telemetry).

        Returns:
            LLMResponse with content and metadata.
        """
        tracer = get_tracer()

        with tracer.start_as_current_span("llm.generate") as span:
            span.set_attribute("llm.model", self.model)
            span.set_attribute("llm.provider", self.provider)
            span.set_attribute("caller.name", caller)

            messages = []
            if system_prompt:
                messages.append(SystemMessage(content=system_prompt))
            messages.append(HumanMessage(content=prompt))

            span.set_attribute("llm.prompt_length", len(prompt))

            response = await self.llm.ainvoke(messages)
            content = response.content if isinstance(response.content, str) else str(response.content)

            # Extract token usage if available
            tokens_prompt = 0
            tokens_completion = 0
            if hasattr(response, 'response_metadata'):
                usage = response.response_metadata.get('token_usage', {})
                tokens_prompt = usage.get('prompt_tokens', 0)
                tokens_completion = usage.get('completion_tokens', 0)

            tokens_total = tokens_prompt + tokens_completion

            trace_llm_call(
                model=self.model,
                prompt_tokens=tokens_prompt,
                completion_tokens=tokens_completion,
                total_tokens=tokens_total,
            )

            span.set_attribute("llm.response_length", len(content))

            return LLMResponse(
                content=content,
                model=self.model,
                tokens_prompt=tokens_prompt,
                tokens_completion=tokens_completion,
                tokens_total=tokens_total,
                raw_response=response,
            )

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        caller: str = "LLMClient",
    ) -> Any:
        """
        Generate a JSON response from the LLM.
        Strips markdown fences and returns the decoded value.

        Raises:
            json.JSONDecodeError: If the response is not valid JSON
        """
        response = await self.generate(
            prompt=prompt,
            system_prompt=system_prompt,
            caller=caller,
        )
        return json.loads(strip_code_fences(response.content))


# Default client instance
_default_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get the default LLM client instance."""
    global _default_client
    if _default_client is None:
        _default_client = LLMClient()
    return _default_client
