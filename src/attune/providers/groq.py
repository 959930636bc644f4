"""Groq chat-completions client used for directive enrichment.

Groq exposes an OpenAI-compatible API. Enrichment only rephrases the
rule-based directive, so the client raises on transport or parse errors
and leaves the fallback decision to the pipeline.
"""

import json
import logging
import time
from typing import Any

import httpx

from attune.config import get_config
from attune.contracts.orchestrator import (
    BehavioralGapScore,
    ContextState,
    EnrichmentResponse,
    InterventionStrategy,
    UserState,
)
from attune.contracts.profile import OnboardingProfile
from attune.contracts.signals import CollaboratorSignals
from attune.providers.prompts import PromptLoader

logger = logging.getLogger(__name__)


class GroqClient:
    """Async client for the enrichment service."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        prompts: PromptLoader | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.prompts = prompts or PromptLoader()

    @property
    def api_key(self) -> str:
        """Get API key from config if not set."""
        if self._api_key:
            return self._api_key
        return get_config().GROQ_API_KEY

    @property
    def base_url(self) -> str:
        return self._base_url or get_config().ENRICHMENT_ENDPOINT

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=get_config().ENRICHMENT_TIMEOUT_S,
                transport=self._transport,
            )
        return self._client

    def build_messages(
        self,
        state: UserState,
        context: ContextState,
        gap: BehavioralGapScore,
        strategy: InterventionStrategy,
        profile: OnboardingProfile | None = None,
        signals: CollaboratorSignals | None = None,
    ) -> list[dict[str, str]]:
        """Render the system and user prompts."""
        user_prompt = self.prompts.render(
            "enrichment",
            "user",
            state=state,
            context=context,
            gap=gap,
            strategy=strategy,
            profile=profile or OnboardingProfile(),
            signals=signals or CollaboratorSignals(),
        )
        return [
            {"role": "system", "content": self.prompts.render("enrichment", "system")},
            {"role": "user", "content": user_prompt},
        ]

    async def enrich(
        self,
        state: UserState,
        context: ContextState,
        gap: BehavioralGapScore,
        strategy: InterventionStrategy,
        profile: OnboardingProfile | None = None,
        signals: CollaboratorSignals | None = None,
    ) -> EnrichmentResponse | None:
        """Ask the service for personalized wording.

        Returns None when no API key is configured or the reply is empty.

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx status.
            ValueError: If the reply is not a well-formed completion or its
                content is not a JSON object (includes pydantic.ValidationError).
            KeyError: If the reply has no choices field.
        """
        if not self.api_key:
            logger.debug("No GROQ_API_KEY configured, skipping enrichment")
            return None

        config = get_config()
        payload: dict[str, Any] = {
            "model": config.ENRICHMENT_MODEL,
            "messages": self.build_messages(state, context, gap, strategy, profile, signals),
            "temperature": config.ENRICHMENT_TEMPERATURE,
            "max_tokens": config.ENRICHMENT_MAX_TOKENS,
            "response_format": {"type": "json_object"},
        }

        start_time = time.time()
        client = await self._get_client()
        response = await client.post("/chat/completions", json=payload)
        response.raise_for_status()
        content = self._extract_content(response.json())
        latency_ms = int((time.time() - start_time) * 1000)
        if not content:
            logger.warning(f"Empty enrichment response after {latency_ms}ms")
            return None

        logger.debug(f"Enrichment response in {latency_ms}ms: {content[:120]}")
        parsed = json.loads(content)
        if not isinstance(parsed, dict):
            raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
        return EnrichmentResponse.model_validate(parsed)

    @staticmethod
    def _extract_content(data: Any) -> str | None:
        """Pull the first choice's message content out of a completion body."""
        if not isinstance(data, dict):
            raise ValueError(f"Expected a completion object, got {type(data).__name__}")
        choices = data["choices"]
        if not isinstance(choices, list) or not choices:
            raise ValueError("Completion has no choices")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise ValueError("Completion choice has no message")
        content = message.get("content")
        if content is not None and not isinstance(content, str):
            raise ValueError(f"Expected string content, got {type(content).__name__}")
        return content

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
