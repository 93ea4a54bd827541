"""
LeaderDojo
Prompt Registry.

YAML-based prompt template management with:
    - Built-in default templates for every gateway operation
    - Optional overrides loaded from AI_PROMPTS_DIR (*.yaml)
    - {{variable}} rendering
    - Version tracking

Usage:
    from leaderdojo.ai.prompt_registry import PromptRegistry
    registry = PromptRegistry()
    messages = registry.render("entry_summary", raw_content="...", project_context="")

YAML override format:
    name: entry_summary
    version: v1
    system: |
      ...
    user: |
      ...
"""

import logging
import re
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class PromptTemplate:
    """A single prompt template with metadata."""

    def __init__(self, name: str, version: str, system: str, user: str,
                 description: str = ""):
        self.name = name
        self.version = version
        self.system = system
        self.user = user
        self.description = description

    def render(self, **variables) -> list[dict]:
        """
        Render template with variables, returning chat messages.

        Returns:
            List of message dicts: [{"role": "system", "content": "..."}, ...]
        """
        system_rendered = self._substitute(self.system, variables)
        user_rendered = self._substitute(self.user, variables)

        messages = []
        if system_rendered.strip():
            messages.append({"role": "system", "content": system_rendered})
        if user_rendered.strip():
            messages.append({"role": "user", "content": user_rendered})
        return messages

    @staticmethod
    def _substitute(template: str, variables: dict) -> str:
        """Replace {{var}} placeholders with values. None renders as empty."""
        def replacer(match):
            key = match.group(1).strip()
            if key not in variables:
                return match.group(0)
            value = variables[key]
            return "" if value is None else str(value)
        return re.sub(r'\{\{(\s*\w+\s*)\}\}', replacer, template)


class PromptRegistry:
    """
    Registry for loading and managing prompt templates.

    Built-in defaults are always registered; YAML files in ``prompts_dir``
    replace them by (name, version).
    """

    def __init__(self, prompts_dir: str | None = None):
        self._prompts_dir = prompts_dir
        self._templates: dict[str, dict[str, PromptTemplate]] = {}  # name → {version → template}
        for tpl in _DEFAULT_TEMPLATES:
            self._register(tpl)
        if prompts_dir:
            self._load_from_dir(Path(prompts_dir))

    def _load_from_dir(self, prompts_path: Path):
        if not prompts_path.exists():
            logger.info("Prompts directory not found: %s. Using defaults only.", prompts_path)
            return

        for yaml_file in sorted(prompts_path.glob("*.yaml")):
            with open(yaml_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if not data or not isinstance(data, dict):
                logger.warning("Skipping prompt file %s: not a mapping", yaml_file.name)
                continue

            tpl = PromptTemplate(
                name=data.get("name", yaml_file.stem),
                version=data.get("version", "v1"),
                system=data.get("system", ""),
                user=data.get("user", ""),
                description=data.get("description", ""),
            )
            self._register(tpl)
            logger.info("Loaded prompt template: %s (%s) from %s",
                        tpl.name, tpl.version, yaml_file.name)

    def _register(self, template: PromptTemplate):
        self._templates.setdefault(template.name, {})[template.version] = template

    def get(self, name: str, version: str = "v1") -> PromptTemplate | None:
        return self._templates.get(name, {}).get(version)

    def render(self, name: str, version: str = "v1", **variables) -> list[dict]:
        """
        Render a prompt template with variables.

        Raises:
            KeyError: If template not found.
        """
        tpl = self.get(name, version)
        if not tpl:
            raise KeyError(f"Prompt template not found: {name} {version}")
        return tpl.render(**variables)


# ── Built-in Default Templates ────────────────────────────────────────────────

_SYSTEM_BASE = (
    "You are a chief of staff for a senior leader. You are concise, concrete "
    "and never invent facts that are not in the material you are given. "
    "Always answer with a single JSON object and nothing else."
)

_DEFAULT_TEMPLATES = [
    PromptTemplate(
        name="entry_summary",
        version="v1",
        description="Summarize a meeting/update and extract commitments",
        system=_SYSTEM_BASE,
        user=(
            "Summarize the following meeting or update, capturing background, "
            "key takeaways and decisions. Extract actionable commitments with a "
            "direction: \"i_owe\" when the leader owes something, \"waiting_for\" "
            "when someone owes the leader.\n\n"
            "Return JSON with keys: summary (string), keyDecisions (string[]), "
            "openQuestions (string[]), suggestedActions (array of {title, direction, "
            "counterparty?, dueDate? (YYYY-MM-DD), notes?, importance? (1-5), urgency? (1-5)}).\n\n"
            "{{project_context}}\n\n"
            "Transcript:\n{{raw_content}}"
        ),
    ),
    PromptTemplate(
        name="prep_briefing",
        version="v1",
        description="Pre-meeting briefing from recent entries and open commitments",
        system=_SYSTEM_BASE,
        user=(
            "Project: {{project_name}}\n\n"
            "Recent entries:\n{{entries}}\n\n"
            "Outstanding commitments:\n{{commitments}}\n\n"
            "Generate a concise prep briefing and 3-5 talking points.\n"
            "Return JSON with keys: briefing (string), talkingPoints (string[])."
        ),
    ),
    PromptTemplate(
        name="reflection_prompts",
        version="v1",
        description="Reflection questions and suggestions for a period",
        system=_SYSTEM_BASE,
        user=(
            "Timeframe: {{timeframe}}\n\n"
            "Stats snapshot:\n{{stats}}\n\n"
            "Create reflective questions and improvement suggestions tailored to a senior leader.\n"
            "Return JSON with keys: questions (string[]), suggestions (string[])."
        ),
    ),
]
