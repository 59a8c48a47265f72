"""
LLM Client for OpenAI integration.
Supports OpenAI chat completions (with Structured Outputs) and a mock provider.
"""
import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx
from openai import OpenAI

from leadflow.core.config import settings

logger = logging.getLogger(__name__)

STRUCTURED_OUTPUT_MODEL_PREFIXES = ("gpt-4o", "gpt-4.1", "gpt-5")


class LLMError(RuntimeError):
    """Raised when the provider fails and mock fallback is disabled."""


def fix_schema_for_openai(s: Any) -> Any:
    """
    Recursively fix a JSON schema for OpenAI Structured Outputs:
    - every object gets additionalProperties: false
    - arrays missing `items` default to string items
    """
    if isinstance(s, dict):
        result = {}
        for key, value in s.items():
            if key == "properties":
                result[key] = {k: fix_schema_for_openai(v) for k, v in value.items()}
            elif isinstance(value, (dict, list)):
                result[key] = fix_schema_for_openai(value)
            else:
                result[key] = value

        if s.get("type") == "array" and "items" not in result:
            result["items"] = {"type": "string"}
            logger.warning("  Added missing 'items' property to array (defaulting to string)")

        if s.get("type") == "object" and "additionalProperties" not in result:
            result["additionalProperties"] = False

        return result
    if isinstance(s, list):
        return [fix_schema_for_openai(item) for item in s]
    return s


def categorize_error(error: Exception) -> str:
    """Coarse failure category used in logs and user-facing messages."""
    error_type = type(error).__name__
    error_lower = str(error).lower()
    if "timeout" in error_lower or "timed out" in error_lower or error_type == "APITimeoutError":
        return "timeout"
    if "rate limit" in error_lower or "429" in error_lower:
        return "rate_limit"
    if "connection" in error_lower or "network" in error_lower or "econnrefused" in error_lower:
        return "network"
    if "api key" in error_lower or "authentication" in error_lower or "401" in error_lower:
        return "authentication"
    if "quota" in error_lower or "billing" in error_lower:
        return "quota"
    return "unknown"


class LLMClient:
    """Client for LLM generation. Supports OpenAI and mock modes."""

    def __init__(
        self,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_s: Optional[int] = None,
        fallback_to_mock: Optional[bool] = None,
    ):
        self.provider = (provider or settings.LLM_PROVIDER or "mock").lower().strip()
        self.api_key = (api_key if api_key is not None else settings.llm_api_key).strip()
        self.model = (model or settings.LLM_MODEL).strip()
        self.timeout_s = timeout_s or settings.LLM_TIMEOUT_SECONDS
        self.fallback_to_mock = settings.LLM_FALLBACK_TO_MOCK if fallback_to_mock is None else fallback_to_mock

        logger.info(
            "LLMClient initialized: provider=%s, model=%s, api key present=%s",
            self.provider,
            self.model,
            bool(self.api_key),
        )

        if self.provider == "openai" and not self.api_key:
            logger.warning(
                "⚠️  LLM_PROVIDER=openai but no API key found. "
                "Set OPENAI_API_KEY or LLM_API_KEY in .env file."
            )

    @property
    def supports_structured_outputs(self) -> bool:
        return self.model.startswith(STRUCTURED_OUTPUT_MODEL_PREFIXES)

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
        schema_name: Optional[str] = None,
        strict_schema: bool = True,
    ) -> str:
        """
        Generate text using the configured LLM provider.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            json_mode: If True, request JSON response format
            schema_name: Schema under leadflow/schemas; also selects the mock payload
            strict_schema: Send the schema as a Structured Outputs contract. Leave
                False for loose schemas that are only validated after the call

        Returns:
            Generated text (mock data if provider is mock, or if OpenAI fails and
            fallback is enabled)
        """
        logger.info("LLM.generate called: provider=%s, json_mode=%s, schema=%s", self.provider, json_mode, schema_name)

        if self.provider == "mock":
            return self._mock_generate(prompt, schema_name)

        if self.provider == "openai":
            structured_schema = schema_name if strict_schema else None
            return self._openai_generate(prompt, system_prompt, json_mode, structured_schema, schema_name)

        logger.error("Unknown provider: %s. Falling back to mock.", self.provider)
        return self._mock_generate(prompt, schema_name)

    def _response_format(self, json_mode: bool, schema_name: Optional[str]) -> Optional[Dict[str, Any]]:
        if not json_mode:
            return None
        if schema_name and self.supports_structured_outputs:
            from leadflow.llm.json_guard import load_schema

            schema = fix_schema_for_openai(load_schema(schema_name))
            logger.info("  Using Structured Outputs with schema: %s", schema_name)
            return {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "strict": True, "schema": schema},
            }
        return {"type": "json_object"}

    def _openai_generate(
        self,
        prompt: str,
        system_prompt: Optional[str],
        json_mode: bool,
        schema_name: Optional[str] = None,
        mock_schema: Optional[str] = None,
    ) -> str:
        """Generate using OpenAI API. Falls back to mock on error when enabled."""
        if not self.api_key:
            return self._fail(ValueError("No OpenAI API key configured"), prompt, mock_schema)

        logger.info("🚀 Calling OpenAI API (model=%s, timeout=%ds)", self.model, self.timeout_s)
        logger.info("  Prompt length: %d chars", len(prompt))

        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.7,
        }
        response_format = self._response_format(json_mode, schema_name)
        if response_format:
            kwargs["response_format"] = response_format

        start_time = time.time()
        # Explicit httpx client to avoid proxy/compat issues in the SDK default
        with httpx.Client(timeout=httpx.Timeout(self.timeout_s, connect=5.0), follow_redirects=True) as http_client:
            client = OpenAI(
                api_key=self.api_key,
                http_client=http_client,
                timeout=float(self.timeout_s),
                max_retries=0,
            )
            try:
                response = client.chat.completions.create(**kwargs)
                content = response.choices[0].message.content
                if not content:
                    raise ValueError("OpenAI returned empty response")
            except Exception as e:
                elapsed = time.time() - start_time
                logger.error(
                    "❌ OPENAI API ERROR after %.1fs (%s, category=%s): %s",
                    elapsed,
                    type(e).__name__,
                    categorize_error(e),
                    e,
                )
                return self._fail(e, prompt, mock_schema)

        logger.info("✅ OpenAI API SUCCESS in %.2fs (%d chars)", time.time() - start_time, len(content))
        return content

    def _fail(self, error: Exception, prompt: str, schema_name: Optional[str]) -> str:
        if not self.fallback_to_mock:
            raise LLMError(str(error)) from error
        logger.error("⚠️  FALLING BACK TO MOCK DATA (%s)", error)
        return self._mock_generate(prompt, schema_name)

    def _mock_generate(self, prompt: str, schema_name: Optional[str]) -> str:
        """
        Return mock responses for development, tests and fallback.
        Clearly marked as placeholders.
        """
        from leadflow.llm.json_guard import get_mock_data

        logger.info("Mock: Returning placeholder for %s", schema_name or "free text")
        if schema_name:
            return json.dumps(get_mock_data(schema_name))
        return "{}"
