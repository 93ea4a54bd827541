"""
LeaderDojo
AI response schemas.

Every gateway call validates the provider's JSON against one of these
models. Providers are prompted for camelCase keys; snake_case is accepted
too. Unknown keys are ignored.

    EntrySummary       summarize_entry
    PrepBriefing       generate_prep_briefing
    ReflectionPrompts  generate_reflection_prompts
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class _AIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SuggestedAction(_AIModel):
    """A commitment the model proposes; a human decides whether to keep it."""

    title: str = Field(..., min_length=1, max_length=200)
    direction: Literal["i_owe", "waiting_for"]
    counterparty: Optional[str] = Field(default=None, max_length=180)
    due_date: Optional[str] = Field(default=None, alias="dueDate", description="ISO date if known.")
    notes: Optional[str] = None
    importance: Optional[StrictInt] = Field(default=None, ge=1, le=5)
    urgency: Optional[StrictInt] = Field(default=None, ge=1, le=5)

    def to_record(self) -> dict:
        """snake_case dict stored on Entry.ai_suggested_actions."""
        return self.model_dump(exclude_none=True)


class EntrySummary(_AIModel):
    summary: str = Field(..., min_length=1)
    key_decisions: List[str] = Field(default_factory=list, alias="keyDecisions")
    open_questions: List[str] = Field(default_factory=list, alias="openQuestions")
    suggested_actions: List[SuggestedAction] = Field(default_factory=list, alias="suggestedActions")


class PrepBriefing(_AIModel):
    briefing: str = Field(..., min_length=1)
    talking_points: List[str] = Field(default_factory=list, alias="talkingPoints")


class ReflectionPrompts(_AIModel):
    questions: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
