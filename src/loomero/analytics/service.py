"""
Dashboard analytics and the intern countdown.

Counts, averages and weekly buckets are SQL aggregates. The only
dialect-specific piece is the day difference behind the average
completion time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, case, func, select

from loomero.db.models import Badge, Milestone, Profile, Progress, Project, UserBadge, as_utc, utcnow
from loomero.exceptions import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql.elements import ColumnElement

WEEKS_SHOWN = 4


@dataclass(frozen=True)
class Countdown:
    end_date: datetime
    days: int
    hours: int
    minutes: int
    is_completed: bool
    can_request_certificate: bool


def compute_countdown(
    start: datetime,
    duration_weeks: int,
    completed_milestones: int,
    total_milestones: int,
    now: datetime | None = None,
) -> Countdown:
    """Time left until ``start + duration_weeks``; zeros once it has passed."""
    now = now or utcnow()
    end = as_utc(start) + timedelta(weeks=duration_weeks)
    remaining = end - now
    if remaining <= timedelta(0):
        return Countdown(
            end_date=end,
            days=0,
            hours=0,
            minutes=0,
            is_completed=True,
            can_request_certificate=completed_milestones >= total_milestones,
        )
    seconds = int(remaining.total_seconds())
    return Countdown(
        end_date=end,
        days=seconds // 86_400,
        hours=seconds % 86_400 // 3_600,
        minutes=seconds % 3_600 // 60,
        is_completed=False,
        can_request_certificate=False,
    )


def week_windows(now: datetime, weeks: int = WEEKS_SHOWN) -> list[tuple[datetime, datetime]]:
    """``(after, up_to)`` bounds of the last ``weeks`` seven-day windows, oldest first."""
    return [(now - timedelta(weeks=k + 1), now - timedelta(weeks=k)) for k in reversed(range(weeks))]


def _count_where(condition: ColumnElement[bool]) -> ColumnElement[int]:
    return func.count(case((condition, 1)))


def _weekly_columns(column: Any, now: datetime, *conditions: Any) -> list[ColumnElement[int]]:  # noqa: ANN401
    return [
        _count_where(and_(*conditions, column > after, column <= up_to)) for after, up_to in week_windows(now)
    ]


def _elapsed_days(dialect: str, start: Any, end: Any) -> ColumnElement[float]:  # noqa: ANN401
    if dialect == "sqlite":
        return func.julianday(end) - func.julianday(start)
    return func.extract("epoch", end - start) / 86_400


def percentage(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


async def get_analytics(db: AsyncSession, days: int = 30, now: datetime | None = None) -> dict:
    """Program-wide metrics for the staff dashboard."""
    now = now or utcnow()
    since = now - timedelta(days=days)
    approved = Progress.status == "approved"

    total_interns = (await db.execute(select(func.count(Profile.id)).where(Profile.role == "intern"))).scalar_one()
    total_projects = (await db.execute(select(func.count(Project.id)))).scalar_one()

    dialect = db.get_bind().dialect.name
    progress_totals = (
        await db.execute(
            select(
                _count_where(approved),
                _count_where(and_(approved, Progress.reviewed_at >= since)),
                func.avg(
                    case(
                        (approved, _elapsed_days(dialect, Progress.created_at, Progress.reviewed_at)),
                    )
                ),
                *_weekly_columns(Progress.reviewed_at, now, approved),
            )
        )
    ).one()
    completed_milestones, recent_approvals, avg_days, *milestone_weeks = progress_totals

    award_totals = (
        await db.execute(
            select(
                func.count(UserBadge.id),
                _count_where(UserBadge.awarded_at >= since),
                *_weekly_columns(UserBadge.awarded_at, now),
            )
        )
    ).one()
    total_badges, recent_badges, *badge_weeks = award_totals

    # A milestone counts as complete once any intern has it approved
    approved_milestones = select(Progress.milestone_id).where(approved).distinct()
    project_rows = (
        await db.execute(
            select(
                Project.title,
                func.count(Milestone.id),
                _count_where(Milestone.id.in_(approved_milestones)),
            )
            .outerjoin(Milestone, Milestone.project_id == Project.id)
            .group_by(Project.id, Project.title, Project.created_at)
            .order_by(Project.created_at.desc())
        )
    ).all()
    project_progress = [
        {"project_name": title, "completed": done, "total": total, "percentage": percentage(done, total)}
        for title, total, done in project_rows
    ]

    distribution_rows = (
        await db.execute(
            select(Badge.badge_type, func.count(UserBadge.id))
            .join(UserBadge, UserBadge.badge_id == Badge.id)
            .group_by(Badge.badge_type)
            .order_by(func.count(UserBadge.id).desc(), Badge.badge_type)
        )
    ).all()
    badge_distribution = [
        {"type": (badge_type or "unknown")[:1].upper() + (badge_type or "unknown")[1:], "count": count}
        for badge_type, count in distribution_rows
    ]

    weekly_progress = [
        {"week": f"Week {i + 1}", "milestones": milestone_weeks[i], "badges": badge_weeks[i]}
        for i in range(WEEKS_SHOWN)
    ]

    badges_per_intern = (
        select(UserBadge.user_id, func.count(UserBadge.id).label("badges"))
        .group_by(UserBadge.user_id)
        .subquery()
    )
    performance_rows = (
        await db.execute(
            select(
                Profile.full_name,
                _count_where(approved),
                _count_where(Progress.status == "rejected"),
                func.coalesce(func.max(badges_per_intern.c.badges), 0),
            )
            .outerjoin(Progress, Progress.intern_id == Profile.id)
            .outerjoin(badges_per_intern, badges_per_intern.c.user_id == Profile.id)
            .where(Profile.role == "intern")
            .group_by(Profile.id, Profile.full_name)
            .order_by(Profile.full_name)
        )
    ).all()
    intern_performance = [
        {
            "name": name or "Unknown",
            "completed_milestones": approvals,
            "badges": badges,
            "approval_rate": percentage(approvals, approvals + rejections),
        }
        for name, approvals, rejections, badges in performance_rows
    ]

    return {
        "days": days,
        "total_interns": total_interns,
        "total_projects": total_projects,
        "total_badges": total_badges,
        "completed_milestones": completed_milestones,
        "recent_approvals": recent_approvals,
        "recent_badges": recent_badges,
        "avg_completion_days": round(float(avg_days), 1) if avg_days is not None else 0.0,
        "project_progress": project_progress,
        "badge_distribution": badge_distribution,
        "weekly_progress": weekly_progress,
        "intern_performance": intern_performance,
    }


async def get_internship_countdown(db: AsyncSession, intern: Profile, now: datetime | None = None) -> dict:
    """
    Countdown for the project the intern most recently worked on.

    Raises:
        NotFoundError: If the intern has no progress yet.
    """
    project = (
        await db.execute(
            select(Project)
            .join(Milestone, Milestone.project_id == Project.id)
            .join(Progress, Progress.milestone_id == Milestone.id)
            .where(Progress.intern_id == intern.id)
            .order_by(Progress.created_at.desc())
            .limit(1)
        )
    ).scalar_one_or_none()
    if project is None:
        msg = "No internship in progress"
        raise NotFoundError(msg)

    total = (
        await db.execute(select(func.count(Milestone.id)).where(Milestone.project_id == project.id))
    ).scalar_one()
    completed = (
        await db.execute(
            select(func.count(func.distinct(Progress.milestone_id)))
            .join(Milestone, Milestone.id == Progress.milestone_id)
            .where(Milestone.project_id == project.id)
            .where(Progress.intern_id == intern.id)
            .where(Progress.status == "approved")
        )
    ).scalar_one()

    start = as_utc(project.created_at)
    countdown = compute_countdown(start, project.duration_weeks, completed, total, now=now)
    return {
        "project_title": project.title,
        "start_date": start,
        "end_date": countdown.end_date,
        "days": countdown.days,
        "hours": countdown.hours,
        "minutes": countdown.minutes,
        "is_completed": countdown.is_completed,
        "can_request_certificate": countdown.can_request_certificate,
        "completed_milestones": completed,
        "total_milestones": total,
    }
