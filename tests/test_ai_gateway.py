"""
Tests for the AI gateway, its schemas, and the prompt registry.

Covers:
  - camelCase and snake_case replies parse into typed results
  - fenced JSON is tolerated
  - provider exceptions, empty content, non-JSON and schema mismatches
  - the JSON schema and purpose are passed to the provider
  - LocalStubProvider determinism
  - build_gateway provider selection
  - PromptRegistry defaults, rendering, and YAML overrides
"""

import json

import pytest

from leaderdojo.ai.gateway import (
    AIGateway,
    LocalStubProvider,
    OpenAIProvider,
    build_gateway,
    parse_json_content,
)
from leaderdojo.ai.prompt_registry import PromptRegistry, PromptTemplate
from leaderdojo.ai.schemas import EntrySummary, SuggestedAction
from leaderdojo.core.exceptions import (
    AIProviderError,
    AIUnavailableError,
    MalformedAIResponseError,
)

SUMMARY_REPLY = {
    "summary": "Budget approved for phase two.",
    "keyDecisions": ["Phase two is funded"],
    "openQuestions": ["Who owns data migration?"],
    "suggestedActions": [
        {"title": "Send proposal", "direction": "i_owe", "counterparty": "Dana", "dueDate": "2026-03-10",
         "importance": 4},
        {"title": "Vendor quote", "direction": "waiting_for"},
    ],
}


class TestSummarizeEntry:
    def test_camel_case_reply_is_parsed(self, gateway, provider):
        provider.queue(SUMMARY_REPLY)
        result = gateway.summarize_entry("We agreed to fund phase two.", project_context="Project: Apollo")

        assert isinstance(result, EntrySummary)
        assert result.summary == "Budget approved for phase two."
        assert result.key_decisions == ["Phase two is funded"]
        assert result.open_questions == ["Who owns data migration?"]
        first, second = result.suggested_actions
        assert first.due_date == "2026-03-10"
        assert first.importance == 4
        assert second.direction == "waiting_for"
        assert second.importance is None

    def test_snake_case_reply_is_accepted(self, gateway, provider):
        provider.queue({"summary": "ok", "key_decisions": ["d"], "suggested_actions": []})
        result = gateway.summarize_entry("text")
        assert result.key_decisions == ["d"]
        assert result.open_questions == []

    def test_fenced_json_is_tolerated(self, gateway, provider):
        provider.queue("```json\n" + json.dumps({"summary": "fenced"}) + "\n```")
        assert gateway.summarize_entry("text").summary == "fenced"

    def test_prompt_contains_transcript_and_context(self, gateway, provider):
        provider.queue({"summary": "ok"})
        gateway.summarize_entry("Raw meeting notes here", project_context="Project: Apollo")
        assert "Raw meeting notes here" in provider.last_prompt
        assert "Project: Apollo" in provider.last_prompt

    def test_schema_and_purpose_are_sent_to_provider(self, gateway, provider):
        provider.queue({"summary": "ok"})
        gateway.summarize_entry("text")
        call = provider.calls[-1]
        assert call["model"] == "test-model"
        assert call["schema_name"] == "entry_summary"
        assert "suggestedActions" in call["response_schema"]["properties"]

    def test_provider_exception_becomes_provider_error(self, gateway, provider):
        provider.queue(TimeoutError("read timed out"))
        with pytest.raises(AIProviderError) as exc_info:
            gateway.summarize_entry("text")
        assert exc_info.value.purpose == "entry_summary"
        assert exc_info.value.reason == "provider_error"
        assert isinstance(exc_info.value, AIUnavailableError)

    def test_none_content_is_provider_error(self, gateway, provider, monkeypatch):
        monkeypatch.setattr(provider, "chat", lambda *a, **k: {"content": None})
        with pytest.raises(AIProviderError):
            gateway.summarize_entry("text")

    def test_non_json_is_malformed(self, gateway, provider):
        provider.queue("Sure! Here is your summary.")
        with pytest.raises(MalformedAIResponseError) as exc_info:
            gateway.summarize_entry("text")
        assert exc_info.value.reason == "malformed_response"

    def test_json_array_is_malformed(self, gateway, provider):
        provider.queue("[1, 2, 3]")
        with pytest.raises(MalformedAIResponseError):
            gateway.summarize_entry("text")

    def test_missing_summary_is_malformed(self, gateway, provider):
        provider.queue({"keyDecisions": []})
        with pytest.raises(MalformedAIResponseError) as exc_info:
            gateway.summarize_entry("text")
        assert exc_info.value.errors

    def test_out_of_range_importance_is_malformed(self, gateway, provider):
        provider.queue({"summary": "ok", "suggestedActions": [
            {"title": "x", "direction": "i_owe", "importance": 9},
        ]})
        with pytest.raises(MalformedAIResponseError):
            gateway.summarize_entry("text")

    @pytest.mark.parametrize("value", ["4", True, 4.0])
    def test_non_integer_importance_is_malformed(self, gateway, provider, value):
        provider.queue({"summary": "ok", "suggestedActions": [
            {"title": "x", "direction": "i_owe", "importance": value},
        ]})
        with pytest.raises(MalformedAIResponseError):
            gateway.summarize_entry("text")

    def test_non_integer_urgency_is_malformed(self, gateway, provider):
        provider.queue({"summary": "ok", "suggestedActions": [
            {"title": "x", "direction": "i_owe", "urgency": "2"},
        ]})
        with pytest.raises(MalformedAIResponseError):
            gateway.summarize_entry("text")

    def test_unknown_direction_is_malformed(self, gateway, provider):
        provider.queue({"summary": "ok", "suggestedActions": [{"title": "x", "direction": "maybe"}]})
        with pytest.raises(MalformedAIResponseError):
            gateway.summarize_entry("text")


class TestOtherOperations:
    def test_prep_briefing(self, gateway, provider):
        provider.queue({"briefing": "Be ready.", "talkingPoints": ["a", "b"]})
        result = gateway.generate_prep_briefing(
            "Apollo", [{"title": "Kickoff"}], [{"title": "Send deck"}],
        )
        assert result.briefing == "Be ready."
        assert result.talking_points == ["a", "b"]
        assert "Apollo" in provider.last_prompt
        assert "Send deck" in provider.last_prompt
        assert provider.calls[-1]["schema_name"] == "prep_briefing"

    def test_reflection_prompts(self, gateway, provider):
        provider.queue({"questions": ["Q1?"], "suggestions": ["S1"]})
        result = gateway.generate_reflection_prompts("week 2026-03-02 - 2026-03-08", {"meeting_count": 3})
        assert result.questions == ["Q1?"]
        assert result.suggestions == ["S1"]
        assert "meeting_count" in provider.last_prompt


class TestSchemas:
    def test_suggested_action_record_is_snake_case_without_nones(self):
        action = SuggestedAction.model_validate({"title": "Send", "direction": "i_owe", "dueDate": "2026-03-10"})
        assert action.to_record() == {"title": "Send", "direction": "i_owe", "due_date": "2026-03-10"}

    def test_unknown_keys_are_ignored(self):
        summary = EntrySummary.model_validate({"summary": "ok", "confidence": 0.9})
        assert summary.summary == "ok"


class TestParseJsonContent:
    def test_empty_raises(self):
        with pytest.raises(ValueError):
            parse_json_content("   ")

    def test_plain_object(self):
        assert parse_json_content('{"a": 1}') == {"a": 1}


class TestLocalStubProvider:
    def test_summary_extracts_first_sentence_and_actions(self):
        gateway = AIGateway(LocalStubProvider(), model="local-stub")
        text = "We met with finance. Budget looks fine.\nI'll send the proposal\nWaiting for legal review"
        result = gateway.summarize_entry(text)

        assert result.summary == "We met with finance."
        titles = [(a.title, a.direction) for a in result.suggested_actions]
        assert titles == [("send the proposal", "i_owe"), ("legal review", "waiting_for")]

    def test_same_input_same_output(self):
        gateway = AIGateway(LocalStubProvider(), model="local-stub")
        assert gateway.summarize_entry("Same. Text.") == gateway.summarize_entry("Same. Text.")

    def test_briefing_and_reflection(self):
        gateway = AIGateway(LocalStubProvider(), model="local-stub")
        briefing = gateway.generate_prep_briefing("Apollo", [], [])
        assert len(briefing.talking_points) == 3
        prompts = gateway.generate_reflection_prompts("week", {})
        assert len(prompts.questions) == 2


class TestBuildGateway:
    def test_local_provider(self):
        gateway = build_gateway({"AI_PROVIDER": "local", "AI_MODEL": "m"})
        assert gateway.provider_name == "local"
        assert gateway.model == "m"

    def test_openai_without_key_falls_back_to_stub(self):
        gateway = build_gateway({"AI_PROVIDER": "openai", "OPENAI_API_KEY": None})
        assert gateway.provider_name == "local"

    def test_openai_with_key(self):
        gateway = build_gateway({"AI_PROVIDER": "openai", "OPENAI_API_KEY": "sk-test"})
        assert gateway.provider_name == OpenAIProvider.name

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown AI_PROVIDER"):
            build_gateway({"AI_PROVIDER": "carrier-pigeon"})


class TestPromptRegistry:
    def test_defaults_are_registered(self):
        registry = PromptRegistry()
        for name in ("entry_summary", "prep_briefing", "reflection_prompts"):
            assert registry.get(name) is not None

    def test_unknown_template_raises_key_error(self):
        with pytest.raises(KeyError):
            PromptRegistry().render("does_not_exist")

    def test_substitution_leaves_unknown_placeholders(self):
        tpl = PromptTemplate("t", "v1", system="", user="Hi {{name}} {{other}} {{empty}}")
        messages = tpl.render(name="Ada", empty=None)
        assert messages == [{"role": "user", "content": "Hi Ada {{other}} "}]

    def test_yaml_override_replaces_default(self, tmp_path):
        (tmp_path / "summary.yaml").write_text(
            "name: entry_summary\nversion: v1\nsystem: Be brief.\nuser: 'Notes: {{raw_content}}'\n",
            encoding="utf-8",
        )
        registry = PromptRegistry(str(tmp_path))
        messages = registry.render("entry_summary", raw_content="hello")
        assert messages == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Notes: hello"},
        ]

    def test_missing_directory_uses_defaults(self, tmp_path):
        registry = PromptRegistry(str(tmp_path / "nope"))
        assert registry.get("entry_summary") is not None
