"""Smart task downgrade: lighter alternatives for tasks that keep getting missed."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from app.observability.metrics import log_fallback
from app.observability.tracing import trace
from app.services.ai.errors import AllProvidersUnavailable, InvalidAnalysisInput
from app.services.ai.orchestrator import AIOrchestrator

logger = logging.getLogger(__name__)

DIFFICULTIES = ("Easy", "Medium", "Hard")

# Misses needed before a downgrade is offered; easier tasks get more slack.
DOWNGRADE_THRESHOLDS: Dict[str, int] = {"Hard": 2, "Medium": 3, "Easy": 4}

# (category keywords, {difficulty: lighter alternative}); first match wins.
CATEGORY_DOWNGRADES: List[Tuple[Tuple[str, ...], Dict[str, str]]] = [
    (
        ("gym", "workout", "exercise"),
        {
            "Hard": "20-minute light cardio or stretching",
            "Medium": "10-minute walk or yoga",
            "Easy": "5-minute stretching or mobility exercises",
        },
    ),
    (
        ("study", "learn", "read"),
        {
            "Hard": "Review notes for 15 minutes",
            "Medium": "Skim important topics for 10 minutes",
            "Easy": "Quick 5-minute concept recap",
        },
    ),
    (
        ("code", "program", "debug"),
        {
            "Hard": "Read documentation or watch tutorial for 15 minutes",
            "Medium": "Review code concepts for 10 minutes",
            "Easy": "Practice one small coding problem (5-10 mins)",
        },
    ),
    (
        ("write", "essay", "report"),
        {
            "Hard": "Create outline or bullet points only",
            "Medium": "Write one paragraph or key points",
            "Easy": "Brainstorm ideas for 10 minutes",
        },
    ),
    (
        ("practice", "revision"),
        {
            "Hard": "Complete 3 easy problems",
            "Medium": "Review solved examples",
            "Easy": "Quick concept revision (10 mins)",
        },
    ),
]

GENERIC_DOWNGRADES: Dict[str, str] = {
    "Hard": "Reduce scope to 20-30 minutes of easier work",
    "Medium": "Reduce to 15 minutes of simplified version",
    "Easy": "Spend just 10 minutes on the easiest part",
}


@dataclass
class DowngradeSuggestion:
    original_task: str
    difficulty: str
    missed_count: int
    rule_based: str
    ai_generated: Optional[str]
    message: str
    fallback_mode: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def normalize_difficulty(difficulty: Optional[str]) -> Optional[str]:
    value = (difficulty or "").strip().capitalize()
    return value if value in DIFFICULTIES else None


def should_suggest_downgrade(missed_count: int, difficulty: str) -> bool:
    threshold = DOWNGRADE_THRESHOLDS.get(normalize_difficulty(difficulty) or "")
    return threshold is not None and missed_count >= threshold


def get_rule_based_downgrade(task_name: str, difficulty: str) -> str:
    level = normalize_difficulty(difficulty) or "Easy"
    lowered = task_name.lower()
    for keywords, alternatives in CATEGORY_DOWNGRADES:
        if any(keyword in lowered for keyword in keywords):
            return alternatives[level]
    return GENERIC_DOWNGRADES[level]


async def suggest_task_downgrade(
    task_name: str,
    difficulty: str,
    missed_count: int = 2,
    *,
    orchestrator: AIOrchestrator,
) -> DowngradeSuggestion:
    """Offer a rule-based and an AI-written lighter alternative side by side.

    The rule-based suggestion is always present. When the AI is unavailable only the
    rule-based one is returned and ``fallback_mode`` is set.
    """
    task_name = (task_name or "").strip()
    level = normalize_difficulty(difficulty)
    if not task_name or level is None:
        raise InvalidAnalysisInput("Task name and difficulty (Easy, Medium or Hard) are required")
    if missed_count < 0:
        raise InvalidAnalysisInput("missed_count must not be negative")

    rule_based = get_rule_based_downgrade(task_name, level)

    with trace("downgrade.ai_suggestion", metadata={"difficulty": level, "missed_count": missed_count}):
        try:
            ai_generated = await orchestrator.call(_build_prompt(task_name, level, missed_count), max_tokens=200)
        except AllProvidersUnavailable:
            logger.warning("Downgrade AI suggestion unavailable; returning rule-based alternative only")
            log_fallback("downgrade", "all_providers_unavailable")
            return DowngradeSuggestion(
                original_task=task_name,
                difficulty=level,
                missed_count=missed_count,
                rule_based=rule_based,
                ai_generated=None,
                message=f'Consider this easier alternative for "{task_name}":',
                fallback_mode=True,
            )

    return DowngradeSuggestion(
        original_task=task_name,
        difficulty=level,
        missed_count=missed_count,
        rule_based=rule_based,
        ai_generated=ai_generated.strip(),
        message=f'You\'ve missed "{task_name}" {missed_count} times. Here\'s an easier alternative to keep momentum:',
    )


def _build_prompt(task_name: str, difficulty: str, missed_count: int) -> str:
    return (
        "You are a productivity assistant helping a student who keeps missing tasks.\n\n"
        f'Original Task: "{task_name}"\n'
        f"Difficulty: {difficulty}\n"
        f"Times Missed: {missed_count}\n\n"
        "The student needs a lighter, easier alternative to this task so they don't break their habit completely.\n\n"
        "Provide ONE specific, actionable suggestion that:\n"
        "- Takes 10-20 minutes maximum\n"
        "- Is significantly easier than the original\n"
        "- Maintains some progress toward the goal\n"
        "- Feels achievable when motivation is low\n\n"
        "Format: Just the suggestion, 1-2 sentences maximum.\n\n"
        "Example good suggestions:\n"
        '- Instead of "Gym workout" -> "10-minute walk or light stretching"\n'
        '- Instead of "Study 2 hours" -> "Review flashcards for 15 minutes"\n'
        '- Instead of "Complete assignment" -> "Work on outline for 20 minutes"\n\n'
        "Your suggestion:"
    )
