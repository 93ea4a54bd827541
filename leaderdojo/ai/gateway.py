"""
LeaderDojo
AI Gateway.

Typed, fail-fast boundary around the LLM provider. One method per task:

    summarize_entry(raw_text, project_context)          → EntrySummary
    generate_prep_briefing(name, entries, commitments)  → PrepBriefing
    generate_reflection_prompts(timeframe, stats)       → ReflectionPrompts

Each call renders a prompt from the PromptRegistry, sends it together with
the JSON schema of the expected response, and validates the reply with
pydantic. Failures surface as:

    AIProviderError            the provider call failed (network, HTTP, timeout, empty reply)
    MalformedAIResponseError   the reply is not JSON or does not match the schema

Both subclass AIUnavailableError. There is no retry, no cache and no state
beyond the immutable configuration passed to the constructor.

Usage:
    from leaderdojo.ai.gateway import build_gateway
    gateway = build_gateway(app.config)       # done once in create_app
    summary = gateway.summarize_entry("We agreed to ...", project_context="Project: Apollo")
"""

import json
import logging
import re
import time
from abc import ABC, abstractmethod

import openai
from pydantic import ValidationError as PydanticValidationError

from leaderdojo.ai.prompt_registry import PromptRegistry
from leaderdojo.ai.schemas import EntrySummary, PrepBriefing, ReflectionPrompts
from leaderdojo.core.exceptions import AIProviderError, MalformedAIResponseError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"


# ── Provider Abstract Base ────────────────────────────────────────────────────

class LLMProvider(ABC):
    """Abstract interface for LLM providers."""

    name = "base"

    @abstractmethod
    def chat(self, messages: list, model: str, **kwargs) -> dict:
        """
        Send a chat completion request.

        Args:
            messages: List of {"role": "...", "content": "..."} dicts.
            model: Model identifier string.
            **kwargs: temperature, timeout, response_schema, schema_name.

        Returns:
            dict with keys: content, prompt_tokens, completion_tokens, model
        """
        ...


# ── OpenAI Provider ───────────────────────────────────────────────────────────

class OpenAIProvider(LLMProvider):
    """OpenAI chat completions with structured (json_schema) output."""

    name = "openai"

    def __init__(self, api_key: str, timeout: float = 30.0):
        self._client = openai.OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def chat(self, messages: list, model: str = DEFAULT_MODEL, **kwargs) -> dict:
        params = {
            "model": model,
            "messages": messages,
            "temperature": kwargs.get("temperature", 0.4),
        }
        schema = kwargs.get("response_schema")
        if schema:
            params["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": kwargs.get("schema_name", "response"),
                    "schema": schema,
                },
            }
        else:
            params["response_format"] = {"type": "json_object"}
        if kwargs.get("timeout"):
            params["timeout"] = kwargs["timeout"]

        response = self._client.chat.completions.create(**params)
        choice = response.choices[0]
        usage = response.usage
        return {
            "content": choice.message.content,
            "prompt_tokens": usage.prompt_tokens if usage else 0,
            "completion_tokens": usage.completion_tokens if usage else 0,
            "model": model,
        }


# ── Local Stub Provider (for dev/test without API keys) ──────────────────────

_STUB_ACTION_PREFIXES = (
    ("i will ", "i_owe"),
    ("i'll ", "i_owe"),
    ("waiting for ", "waiting_for"),
    ("waiting on ", "waiting_for"),
)

class LocalStubProvider(LLMProvider):
    """
    Local stub that returns deterministic responses for dev/testing.
    No API key required.

    Summaries use the first sentence of the transcript; lines starting with
    "I will" / "I'll" become i_owe actions and lines starting with
    "Waiting for" / "Waiting on" become waiting_for actions.
    """

    name = "local"

    def chat(self, messages: list, model: str = "local-stub", **kwargs) -> dict:
        user_msg = ""
        for m in reversed(messages):
            if m["role"] == "user":
                user_msg = m["content"]
                break

        schema_name = kwargs.get("schema_name", "")
        if schema_name == "entry_summary":
            payload = self._summary(user_msg)
        elif schema_name == "prep_briefing":
            payload = self._briefing(user_msg)
        elif schema_name == "reflection_prompts":
            payload = self._reflection()
        else:
            payload = {"response": "ok"}

        content = json.dumps(payload)
        return {
            "content": content,
            "prompt_tokens": len(user_msg.split()) * 2,  # rough estimate
            "completion_tokens": len(content.split()) * 2,
            "model": "local-stub",
        }

    @staticmethod
    def _summary(user_msg: str) -> dict:
        transcript = user_msg.split("Transcript:\n", 1)[-1].strip()
        first_sentence = re.split(r"(?<=[.!?])\s", transcript, maxsplit=1)[0]
        actions = []
        for line in transcript.splitlines():
            text = line.strip(" -*\t")
            lower = text.lower()
            for prefix, direction in _STUB_ACTION_PREFIXES:
                if lower.startswith(prefix) and len(text) > len(prefix):
                    actions.append({"title": text[len(prefix):][:200], "direction": direction})
                    break
        return {
            "summary": first_sentence[:500] or "No content.",
            "keyDecisions": [],
            "openQuestions": [],
            "suggestedActions": actions,
        }

    @staticmethod
    def _briefing(user_msg: str) -> dict:
        project_line = user_msg.splitlines()[0] if user_msg else "Project"
        return {
            "briefing": f"{project_line}. Review recent entries and open commitments before the meeting.",
            "talkingPoints": [
                "Confirm progress since the last meeting",
                "Walk through open commitments",
                "Agree next steps and owners",
            ],
        }

    @staticmethod
    def _reflection() -> dict:
        return {
            "questions": [
                "What went well in this period?",
                "Which commitment slipped, and why?",
            ],
            "suggestions": ["Block time for the commitments you owe."],
        }


# ── JSON parsing ──────────────────────────────────────────────────────────────

def parse_json_content(content: str) -> dict:
    """Parse a provider reply into a JSON object, tolerating ``` fences.

    Raises:
        ValueError: content is empty, not JSON, or not a JSON object.
    """
    if not content or not content.strip():
        raise ValueError("empty response")
    text = content.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = [l for l in lines if not l.strip().startswith("```")]
        text = "\n".join(lines)
    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


# ── AI Gateway (Main Interface) ───────────────────────────────────────────────

class AIGateway:
    """
    Typed gateway for all AI calls.

    Args:
        provider: LLMProvider instance.
        model: Model identifier passed to the provider.
        temperature: Sampling temperature.
        timeout: Per-call timeout in seconds.
        prompt_registry: PromptRegistry (defaults to built-in templates).
    """

    def __init__(self, provider: LLMProvider, *, model: str = DEFAULT_MODEL,
                 temperature: float = 0.4, timeout: float = 30.0,
                 prompt_registry: PromptRegistry | None = None):
        self._provider = provider
        self._model = model
        self._temperature = temperature
        self._timeout = timeout
        self._prompts = prompt_registry or PromptRegistry()

    @property
    def provider_name(self) -> str:
        return self._provider.name

    @property
    def model(self) -> str:
        return self._model

    # ── Operations ────────────────────────────────────────────────────────

    def summarize_entry(self, raw_text: str, project_context: str | None = None) -> EntrySummary:
        messages = self._prompts.render(
            "entry_summary",
            raw_content=raw_text,
            project_context=f"Project context:\n{project_context}" if project_context else "",
        )
        return self._call("entry_summary", messages, EntrySummary)

    def generate_prep_briefing(self, project_name: str, recent_entries: list[dict],
                               open_commitments: list[dict]) -> PrepBriefing:
        messages = self._prompts.render(
            "prep_briefing",
            project_name=project_name,
            entries=json.dumps(recent_entries, ensure_ascii=False, default=str),
            commitments=json.dumps(open_commitments, ensure_ascii=False, default=str),
        )
        return self._call("prep_briefing", messages, PrepBriefing)

    def generate_reflection_prompts(self, timeframe_label: str, stats: dict) -> ReflectionPrompts:
        messages = self._prompts.render(
            "reflection_prompts",
            timeframe=timeframe_label,
            stats=json.dumps(stats, ensure_ascii=False, sort_keys=True),
        )
        return self._call("reflection_prompts", messages, ReflectionPrompts)

    # ── Internals ─────────────────────────────────────────────────────────

    def _call(self, purpose: str, messages: list[dict], response_model):
        start = time.perf_counter()
        try:
            raw = self._provider.chat(
                messages,
                self._model,
                temperature=self._temperature,
                timeout=self._timeout,
                schema_name=purpose,
                response_schema=response_model.model_json_schema(by_alias=True),
            )
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.warning("AI %s failed via %s after %.0fms: %s",
                           purpose, self._provider.name, elapsed_ms, exc)
            raise AIProviderError(purpose, str(exc)) from exc

        elapsed_ms = (time.perf_counter() - start) * 1000
        content = (raw or {}).get("content")
        if content is None:
            logger.warning("AI %s returned no content via %s", purpose, self._provider.name)
            raise AIProviderError(purpose, "provider returned no content")

        try:
            payload = parse_json_content(content)
        except ValueError as exc:
            logger.warning("AI %s returned non-JSON content: %s", purpose, exc)
            raise MalformedAIResponseError(purpose, str(exc)) from exc

        try:
            result = response_model.model_validate(payload)
        except PydanticValidationError as exc:
            logger.warning("AI %s response failed schema validation: %s", purpose, exc)
            raise MalformedAIResponseError(
                purpose, "response does not match schema",
                errors=exc.errors(include_url=False),
            ) from exc

        logger.info("AI %s ok via %s model=%s tokens=%s/%s (%.0fms)",
                    purpose, self._provider.name, raw.get("model", self._model),
                    raw.get("prompt_tokens"), raw.get("completion_tokens"), elapsed_ms)
        return result


# ── Factory ──────────────────────────────────────────────────────────────────

def build_gateway(config) -> AIGateway:
    """Build the gateway from a Flask config mapping.

    AI_PROVIDER=openai without OPENAI_API_KEY falls back to the local stub
    (with a warning) outside production; ProductionConfig refuses to start
    in that state.
    """
    provider_name = (config.get("AI_PROVIDER") or "openai").lower()
    timeout = float(config.get("AI_TIMEOUT_SECONDS", 30))
    api_key = config.get("OPENAI_API_KEY")

    if provider_name == "openai" and api_key:
        provider = OpenAIProvider(api_key=api_key, timeout=timeout)
    elif provider_name == "openai":
        logger.warning("OPENAI_API_KEY not set, using local stub AI provider")
        provider = LocalStubProvider()
    elif provider_name == "local":
        provider = LocalStubProvider()
    else:
        raise ValueError(f"Unknown AI_PROVIDER: {provider_name!r}")

    return AIGateway(
        provider,
        model=config.get("AI_MODEL", DEFAULT_MODEL),
        temperature=float(config.get("AI_TEMPERATURE", 0.4)),
        timeout=timeout,
        prompt_registry=PromptRegistry(config.get("AI_PROMPTS_DIR")),
    )
