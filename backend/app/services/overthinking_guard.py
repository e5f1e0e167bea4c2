"""Anti-overthinking guard: detects endless re-planning and long inactivity."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from app.observability.metrics import log_fallback
from app.observability.tracing import trace
from app.services.ai.errors import AllProvidersUnavailable, InvalidAnalysisInput
from app.services.ai.orchestrator import AIOrchestrator

logger = logging.getLogger(__name__)

OVERTHINKING_EDITS = 5
STRONG_OVERTHINKING_EDITS = 7
SEVERE_OVERTHINKING_EDITS = 10
INACTIVE_DAYS = 3
LONG_INACTIVE_DAYS = 5
WEEK_INACTIVE_DAYS = 7

EXECUTION_NUDGES = (
    "✅ Start with your easiest task right now",
    "⚡ 10 minutes of action > hours of planning",
    "🎯 Pick one task and begin. Don't think, just do.",
    "💪 Momentum starts with one small step today",
    "🚀 The best plan is the one you actually execute",
)


class Severity(str, Enum):
    NONE = "none"
    MODERATE = "moderate"
    SEVERE = "severe"
    CRITICAL = "critical"


@dataclass
class OverthinkingResult:
    triggered: bool
    severity: Severity
    edit_count: int
    days_inactive: int
    message: Optional[str] = None
    nudge: Optional[str] = None
    fallback_mode: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def should_warn_user(edit_count: int, days_inactive: int) -> bool:
    return edit_count >= OVERTHINKING_EDITS or days_inactive >= INACTIVE_DAYS


def get_severity_level(edit_count: int, days_inactive: int) -> Severity:
    if edit_count >= SEVERE_OVERTHINKING_EDITS:
        return Severity.CRITICAL
    if edit_count >= STRONG_OVERTHINKING_EDITS or days_inactive >= WEEK_INACTIVE_DAYS:
        return Severity.SEVERE
    if edit_count >= OVERTHINKING_EDITS or days_inactive >= INACTIVE_DAYS:
        return Severity.MODERATE
    return Severity.NONE


def get_rule_based_warning(edit_count: int) -> str:
    if edit_count >= SEVERE_OVERTHINKING_EDITS:
        return "🛑 STOP PLANNING! You've edited this 10+ times. Start executing NOW."
    if edit_count >= STRONG_OVERTHINKING_EDITS:
        return "⚠️ Too much planning. Time to take action. Execution beats perfection."
    if edit_count >= OVERTHINKING_EDITS:
        return "💭 You've planned enough. Start working on your first task right now."
    return "📝 Your plan looks good. Time to execute!"


def get_inactivity_message(days_inactive: int) -> str:
    if days_inactive >= WEEK_INACTIVE_DAYS:
        return "⏰ It's been a week! Your plan is waiting. Start with the easiest task today."
    if days_inactive >= LONG_INACTIVE_DAYS:
        return "⏰ 5 days without action. Don't let the plan gather dust. Begin now!"
    return "⏰ 3+ days inactive. Even 10 minutes of work keeps momentum alive."


def get_execution_nudge(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(EXECUTION_NUDGES)


async def check_overthinking(
    edit_count: int,
    days_inactive: int = 0,
    *,
    orchestrator: AIOrchestrator,
    rng: Optional[random.Random] = None,
) -> OverthinkingResult:
    """Decide whether to interrupt the student's planning with a push to act.

    Edit-driven warnings are written by the AI (firm at 10+ edits, gentle at 5+);
    inactivity-only warnings are always canned. If the AI is unavailable the canned
    edit-count warning is used and ``fallback_mode`` is set.
    """
    if edit_count < 0 or days_inactive < 0:
        raise InvalidAnalysisInput("edit_count and days_inactive must not be negative")

    severity = get_severity_level(edit_count, days_inactive)
    if not should_warn_user(edit_count, days_inactive):
        return OverthinkingResult(triggered=False, severity=severity, edit_count=edit_count, days_inactive=days_inactive)

    result = OverthinkingResult(
        triggered=True,
        severity=severity,
        edit_count=edit_count,
        days_inactive=days_inactive,
        nudge=get_execution_nudge(rng),
    )

    if edit_count < OVERTHINKING_EDITS:
        result.message = get_inactivity_message(days_inactive)
        return result

    tone = "severe" if edit_count >= SEVERE_OVERTHINKING_EDITS else "moderate"
    with trace("overthinking.ai_warning", metadata={"edit_count": edit_count, "tone": tone}):
        try:
            warning = await orchestrator.call(_build_prompt(edit_count, tone), max_tokens=100)
        except AllProvidersUnavailable:
            logger.warning("Overthinking AI warning unavailable; using rule-based message")
            log_fallback("overthinking", "all_providers_unavailable")
            result.message = get_rule_based_warning(edit_count)
            result.fallback_mode = True
            return result

    message = warning.strip().strip("\"'“”").strip()
    if not message:
        logger.warning("Overthinking AI warning was blank; using rule-based message")
        log_fallback("overthinking", "empty_ai_message")
        result.message = get_rule_based_warning(edit_count)
        result.fallback_mode = True
        return result

    result.message = message
    return result


def _build_prompt(edit_count: int, tone: str) -> str:
    style = "Be very direct and motivating" if tone == "severe" else "Be gentle but clear"
    return (
        f"You are a productivity coach. A student has edited their weekly plan {edit_count} times.\n\n"
        "This is a sign of overthinking and planning paralysis.\n\n"
        "Generate a firm but friendly one-sentence message to:\n"
        "1. Acknowledge they've planned enough\n"
        "2. Push them to start executing\n"
        f"3. {style}\n\n"
        "Keep it under 20 words. Make it memorable and actionable.\n\n"
        "Examples:\n"
        '- "Planning band karo, kaam shuru karo. Execution beats perfection."\n'
        f'- "You\'ve refined this {edit_count} times. Time to DO, not just plan."\n'
        '- "Stop tweaking. Start working. Progress > Perfect plans."\n\n'
        "Your message:"
    )
