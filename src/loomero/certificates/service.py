"""
Certificate issuing.

A certificate can be issued once every milestone of a project is approved for
the intern. Re-issuing refreshes the existing (intern, project) row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from loomero.certificates.rendering import format_long_date, new_certificate_id
from loomero.db.models import Certificate, Milestone, Profile, Progress, Project, as_utc, utcnow
from loomero.exceptions import NotFoundError
from loomero.progress.service import is_certificate_eligible

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DEFAULT_MENTOR_NAME = "LoomeroFlow Team"


def latest_approval_query(intern_id: uuid.UUID, project_id: uuid.UUID) -> Select[tuple[Progress]]:
    """The intern's most recently reviewed approval within the project."""
    return (
        select(Progress)
        .join(Milestone, Milestone.id == Progress.milestone_id)
        .where(Milestone.project_id == project_id)
        .where(Progress.intern_id == intern_id)
        .where(Progress.status == "approved")
        .order_by(Progress.reviewed_at.desc().nulls_last(), Progress.updated_at.desc())
        .limit(1)
    )


def _resolve_intern_id(caller: Profile, intern_id: uuid.UUID | None) -> uuid.UUID:
    if caller.role == "intern":
        if intern_id is not None and intern_id != caller.id:
            msg = "Interns may only issue their own certificates"
            raise PermissionError(msg)
        return caller.id
    if intern_id is None:
        msg = "intern_id is required"
        raise ValueError(msg)
    return intern_id


async def issue_certificate(
    db: AsyncSession,
    caller: Profile,
    project_id: uuid.UUID,
    intern_id: uuid.UUID | None = None,
) -> Certificate:
    """
    Issue (or re-issue) a completion certificate.

    Raises:
        PermissionError: If an intern issues for someone else.
        NotFoundError: If the project or intern does not exist.
        ValueError: If any milestone is not yet approved.
    """
    intern_id = _resolve_intern_id(caller, intern_id)
    project = await db.get(Project, project_id)
    if project is None:
        msg = "Project not found"
        raise NotFoundError(msg)
    intern = await db.get(Profile, intern_id)
    if intern is None:
        msg = "Intern not found"
        raise NotFoundError(msg)

    if not await is_certificate_eligible(db, intern_id, project_id):
        msg = "All milestones must be approved before issuing a certificate"
        raise ValueError(msg)

    latest = await db.execute(latest_approval_query(intern_id, project_id))
    last_approval = latest.scalar_one()
    mentor = await db.get(Profile, last_approval.mentor_id) if last_approval.mentor_id else None

    now = utcnow()
    completed = as_utc(last_approval.reviewed_at or last_approval.updated_at)
    data = {
        "internName": intern.full_name or intern.email,
        "projectTitle": project.title,
        "mentorName": (mentor.full_name if mentor else None) or DEFAULT_MENTOR_NAME,
        "completionDate": format_long_date(completed),
        "issueDate": format_long_date(now),
        "certificateId": new_certificate_id(),
    }

    result = await db.execute(
        select(Certificate).where(Certificate.intern_id == intern_id, Certificate.project_id == project_id)
    )
    certificate = result.scalar_one_or_none()
    if certificate is None:
        certificate = Certificate(intern_id=intern_id, project_id=project_id, created_at=now)
        db.add(certificate)
    certificate.mentor_id = mentor.id if mentor else None
    certificate.status = "issued"
    certificate.certificate_data = data
    certificate.issued_at = now
    certificate.updated_at = now
    await db.flush()

    logger.info(
        "certificate_issued",
        certificate_id=data["certificateId"],
        intern_id=str(intern_id),
        project_id=str(project_id),
    )
    return certificate


async def get_certificate(db: AsyncSession, caller: Profile, certificate_id: uuid.UUID) -> Certificate:
    """
    Fetch a certificate readable by the caller.

    Raises:
        NotFoundError: If the certificate does not exist.
        PermissionError: If an intern asks for someone else's certificate.
    """
    certificate = await db.get(Certificate, certificate_id)
    if certificate is None:
        msg = "Certificate not found"
        raise NotFoundError(msg)
    if caller.role == "intern" and certificate.intern_id != caller.id:
        msg = "Not your certificate"
        raise PermissionError(msg)
    return certificate


async def list_certificates(
    db: AsyncSession,
    caller: Profile,
    intern_id: uuid.UUID | None = None,
) -> Sequence[Certificate]:
    """Interns see their own; staff see all, optionally for one intern."""
    query = select(Certificate)
    if caller.role == "intern":
        query = query.where(Certificate.intern_id == caller.id)
    elif intern_id is not None:
        query = query.where(Certificate.intern_id == intern_id)
    result = await db.execute(query.order_by(Certificate.created_at.desc()))
    return result.scalars().all()
