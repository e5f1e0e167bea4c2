"""Pydantic schemas for the AI analysis API."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Difficulty = Literal["Easy", "Medium", "Hard"]
TaskStatus = Literal["pending", "completed", "skipped"]


class PlannedTask(BaseModel):
    day: str
    task_name: Optional[str] = None
    difficulty: Optional[Difficulty] = None


class GenerateTasksRequest(BaseModel):
    goal_name: str = Field(..., max_length=200)
    goal_category: Optional[str] = None


class GenerateTasksResponse(BaseModel):
    success: bool = True
    goal_name: str
    tasks: List[str]
    raw_response: str


class FeasibilityRequest(BaseModel):
    daily_tasks: List[PlannedTask] = Field(default_factory=list)
    mood: Optional[str] = None
    main_focus_day: Optional[str] = None


class DayLoadPayload(BaseModel):
    day: str
    task_count: int
    load: int
    label: str


class FeasibilityChecksPayload(BaseModel):
    total_tasks: int
    total_load: int
    average_load: float
    heavy_days: List[str]
    empty_days: List[str]
    daily_breakdown: List[DayLoadPayload]
    has_issues: bool
    feasible: bool
    warnings: List[str]


class FeasibilityResponse(BaseModel):
    success: bool = True
    feasible: bool
    rule_based_checks: FeasibilityChecksPayload
    ai_suggestions: Optional[str] = None
    fallback_mode: bool = False
    error: Optional[str] = None
    timestamp: datetime


class DowngradeRequest(BaseModel):
    task_name: str = Field(..., max_length=200)
    difficulty: Difficulty
    missed_count: int = Field(2, ge=0)


class DowngradeSuggestionsPayload(BaseModel):
    rule_based: str
    ai_generated: Optional[str] = None


class DowngradeResponse(BaseModel):
    success: bool = True
    original_task: str
    difficulty: str
    missed_count: int
    should_downgrade: bool
    suggestions: DowngradeSuggestionsPayload
    message: str
    fallback_mode: bool = False
    timestamp: datetime


class TaskOutcome(BaseModel):
    task_name: str
    day: Optional[str] = None
    status: TaskStatus


class WeeklyReflectionRequest(BaseModel):
    total_tasks: int = Field(..., gt=0)
    completed_tasks: int = Field(..., ge=0)
    missed_tasks: int = Field(0, ge=0)
    task_breakdown: List[TaskOutcome] = Field(default_factory=list)
    mood: Optional[str] = None
    main_focus_day: Optional[str] = None


class WeekSummaryPayload(BaseModel):
    total_tasks: int
    completed_tasks: int
    missed_tasks: int
    completion_rate: int
    mood: Optional[str] = None
    main_focus_day: Optional[str] = None


class WeeklyReflectionResponse(BaseModel):
    success: bool = True
    week_summary: WeekSummaryPayload
    reflection: Dict[str, List[str]]
    raw_ai_response: Optional[str] = None
    fallback_mode: bool = False
    timestamp: datetime


class OverthinkingRequest(BaseModel):
    edit_count: int = Field(..., ge=0)
    days_inactive: int = Field(0, ge=0)


class OverthinkingResponse(BaseModel):
    success: bool = True
    triggered: bool
    severity: Literal["none", "moderate", "severe", "critical"]
    edit_count: int
    days_inactive: int
    message: Optional[str] = None
    nudge: Optional[str] = None
    fallback_mode: bool = False
    timestamp: datetime


class InsightsRequest(BaseModel):
    daily_tasks: List[PlannedTask] = Field(default_factory=list)
    main_focus_day: Optional[str] = None
    mood: Optional[str] = None


class DayWorkloadPayload(BaseModel):
    day: str
    task_count: int
    load: int


class InsightsResponse(BaseModel):
    success: bool = True
    insights: str
    workload_summary: List[DayWorkloadPayload]


class ProviderPayload(BaseModel):
    id: str
    name: str
    free: bool
    speed: str
    quality: str


class ProviderInfoResponse(BaseModel):
    providers: List[ProviderPayload]
    fallback_enabled: bool


class ConnectionTestResponse(BaseModel):
    success: bool
    response: Optional[str] = None
    error: Optional[str] = None
