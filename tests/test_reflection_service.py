"""Tests for reflection generation and saving."""

from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from leaderdojo.core.exceptions import MalformedAIResponseError, NotFoundError, ValidationError
from leaderdojo.models import db
from leaderdojo.repositories import CommitmentsRepository, EntriesRepository
from leaderdojo.services import reflection_service
from leaderdojo.services.reflection_service import ReflectionService, period_stats, timeframe_label


class TestPeriodStats:
    def test_counts(self):
        entries = [
            SimpleNamespace(kind="meeting", is_decision=False),
            SimpleNamespace(kind="meeting", is_decision=True),
            SimpleNamespace(kind="decision", is_decision=True),
            SimpleNamespace(kind="note", is_decision=False),
        ]
        commitments = [
            SimpleNamespace(status="open", direction="i_owe"),
            SimpleNamespace(status="open", direction="waiting_for"),
            SimpleNamespace(status="done", direction="i_owe"),
        ]
        assert period_stats(entries, commitments) == {
            "meeting_count": 2,
            "decision_count": 2,
            "open_commitments": 2,
            "waiting_for": 1,
            "i_owe": 1,
        }

    def test_timeframe_label(self):
        assert timeframe_label("week", date(2026, 3, 2), date(2026, 3, 8)) == "week 2026-03-02 - 2026-03-08"


class TestGenerate:
    def test_stats_cover_only_the_period(self, gateway, provider, project, user_id):
        entries = EntriesRepository()
        entries.create(user_id, {"project_id": project.id, "kind": "meeting", "title": "In",
                                 "occurred_at": datetime(2026, 3, 8, 23, 0, tzinfo=timezone.utc)})
        entries.create(user_id, {"project_id": project.id, "kind": "meeting", "title": "Out",
                                 "occurred_at": datetime(2026, 3, 9, 0, 30, tzinfo=timezone.utc)})
        CommitmentsRepository().create(user_id, {"project_id": project.id, "title": "Due in week",
                                                 "direction": "i_owe", "due_date": date(2026, 3, 4)})
        db.session.commit()
        provider.queue({"questions": ["What slipped?"], "suggestions": ["Protect focus time"]})

        result = ReflectionService(gateway).generate(user_id, "week", "2026-03-02", "2026-03-08")

        assert result["period_start"] == "2026-03-02"
        assert result["period_end"] == "2026-03-08"
        assert result["stats"]["meeting_count"] == 1
        assert result["stats"]["i_owe"] == 1
        assert result["questions"] == ["What slipped?"]
        assert result["suggestions"] == ["Protect focus time"]
        assert "week 2026-03-02 - 2026-03-08" in provider.last_prompt

    def test_generate_persists_nothing(self, gateway, provider, user_id):
        provider.queue({"questions": ["Q"]})
        ReflectionService(gateway).generate(user_id, "month", "2026-02-01", "2026-02-28")
        assert reflection_service.list_reflections(user_id) == []

    def test_requires_period_type(self, gateway, provider, user_id):
        with pytest.raises(ValidationError) as exc_info:
            ReflectionService(gateway).generate(user_id, None, None, None)
        assert "period_type" in exc_info.value.details
        assert provider.calls == []

    def test_malformed_reply(self, gateway, provider, user_id):
        provider.queue({"questions": "not a list"})
        with pytest.raises(MalformedAIResponseError):
            ReflectionService(gateway).generate(user_id, "week", "2026-03-02", "2026-03-08")


class TestSaveReflection:
    def test_save_with_answers_and_stats(self, project, user_id):
        reflection = reflection_service.save_reflection(user_id, {
            "period_type": "week",
            "period_start": "2026-03-02",
            "period_end": "2026-03-08",
            "questions_and_answers": [{"question": "What went well?", "answer": "Launch"}],
            "stats": {"meeting_count": 3},
            "ai_questions": ["What went well?"],
            "project_id": project.id,
        })
        data = reflection.to_dict()
        assert data["period_start"] == "2026-03-02"
        assert data["stats"] == {"meeting_count": 3}
        assert data["ai_questions"] == ["What went well?"]
        assert data["project_id"] == project.id

    def test_entry_supplies_project(self, project, user_id):
        entry = EntriesRepository().create(user_id, {"project_id": project.id, "kind": "reflection", "title": "r"})
        db.session.commit()
        reflection = reflection_service.save_reflection(user_id, {
            "entry_id": entry.id, "questions_and_answers": [{"question": "Why?", "answer": ""}],
        })
        assert reflection.project_id == project.id
        assert reflection.period_type is None

    def test_invalid_stats(self, user_id):
        with pytest.raises(ValidationError):
            reflection_service.save_reflection(user_id, {"stats": {"meetings": "three"}})

    def test_invalid_ai_questions(self, user_id):
        with pytest.raises(ValidationError) as exc_info:
            reflection_service.save_reflection(user_id, {"ai_questions": [1, 2]})
        assert "ai_questions" in exc_info.value.details

    def test_foreign_entry_not_found(self, project, user_id, other_user_id):
        entry = EntriesRepository().create(user_id, {"project_id": project.id, "kind": "note", "title": "n"})
        db.session.commit()
        with pytest.raises(NotFoundError):
            reflection_service.save_reflection(other_user_id, {"entry_id": entry.id})

    def test_list_by_period_type(self, user_id):
        reflection_service.save_reflection(user_id, {
            "period_type": "month", "period_start": "2026-02-01", "period_end": "2026-02-28",
        })
        reflection_service.save_reflection(user_id, {"questions_and_answers": []})
        assert len(reflection_service.list_reflections(user_id)) == 2
        assert [r.period_type for r in reflection_service.list_reflections(user_id, period_type="month")] == ["month"]
