"""Response schemas for analytics and the internship countdown."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ProjectProgressItem(BaseModel):
    project_name: str
    completed: int
    total: int
    percentage: int


class BadgeDistributionItem(BaseModel):
    type: str
    count: int


class WeeklyProgressItem(BaseModel):
    week: str
    milestones: int
    badges: int


class InternPerformanceItem(BaseModel):
    name: str
    completed_milestones: int
    badges: int
    approval_rate: int


class AnalyticsResponse(BaseModel):
    days: int
    total_interns: int
    total_projects: int
    total_badges: int
    completed_milestones: int
    recent_approvals: int
    recent_badges: int
    avg_completion_days: float
    project_progress: list[ProjectProgressItem]
    badge_distribution: list[BadgeDistributionItem]
    weekly_progress: list[WeeklyProgressItem]
    intern_performance: list[InternPerformanceItem]


class InternshipCountdownResponse(BaseModel):
    project_title: str
    start_date: datetime
    end_date: datetime
    days: int
    hours: int
    minutes: int
    is_completed: bool
    can_request_certificate: bool
    completed_milestones: int
    total_milestones: int
