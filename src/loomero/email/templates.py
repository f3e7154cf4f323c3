"""
Email templates for LoomeroFlow.

All templates use inline CSS for email client compatibility. Every value that
originates from a user (names, titles, feedback) is HTML-escaped before it is
interpolated.

Each template function returns (subject, html_body, text_body).
"""

from __future__ import annotations

from html import escape

# Color constants
BRAND = "#8F6A4D"
BRAND_MUTED = "#65604D"
ACCENT_BLUE = "#2563eb"
TEXT_PRIMARY = "#333333"
TEXT_SECONDARY = "#666666"
BORDER = "#e5e7eb"

SIGNATURE_HTML = """\
<div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #eee;">
    <p style="color: #666; font-size: 14px;">Best regards,<br>Team LoomeroFlow</p>
</div>"""
SIGNATURE_TEXT = "Best regards,\nTeam LoomeroFlow"


def _base_layout(content: str) -> str:
    """Wrap content in the base email layout."""
    return f"""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; color: {TEXT_PRIMARY};">
{content}
</div>"""


def _callout(title: str, body: str, background: str, border: str, title_color: str, body_color: str) -> str:
    """Render a highlighted block (feedback, notes)."""
    return f"""\
<div style="background-color: {background}; padding: 20px; border-radius: 8px; margin: 20px 0; border-left: 4px solid {border};">
    <h3 style="color: {title_color}; margin: 0 0 10px 0;">{title}</h3>
    <p style="margin: 0; color: {body_color};">{escape(body)}</p>
</div>"""


def approval_email(user_name: str, role: str, access_code: str, email: str) -> tuple[str, str, str]:
    """
    Sent when an admin approves a pending user.

    Returns:
        (subject, html_body, text_body)
    """
    role_label = role[:1].upper() + role[1:]
    subject = "\U0001f389 Your Access to LoomeroFlow Has Been Approved!"
    steps = [
        "Go to the LoomeroFlow login page",
        'Click "Continue with Google"',
        "Enter your 6-digit access code when prompted",
        f"You'll be redirected to your {escape(role)} dashboard",
    ]
    steps_html = "".join(f"<li>{s}</li>" for s in steps)
    content = f"""\
<h1 style="color: {TEXT_PRIMARY}; text-align: center;">\U0001f389 Welcome to LoomeroFlow!</h1>
<p>Hi {escape(user_name)},</p>
<p>Your request to access <strong>LoomeroFlow</strong> has been approved.<br>
You've been assigned the role of <strong>{escape(role_label)}</strong>.</p>
<div style="background-color: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0; text-align: center;">
    <h2 style="color: {TEXT_PRIMARY}; margin-bottom: 10px;">\U0001f510 Your Access Code:</h2>
    <div style="font-size: 32px; font-weight: bold; color: {ACCENT_BLUE}; letter-spacing: 4px; font-family: monospace;">
        {escape(access_code)}
    </div>
    <p style="color: {TEXT_SECONDARY}; margin-top: 10px; font-size: 14px;">
        Use this code whenever you log in to access your personalized dashboard.
    </p>
</div>
<div style="background-color: #eff6ff; padding: 15px; border-radius: 8px; border-left: 4px solid {ACCENT_BLUE};">
    <h3 style="color: #1e40af; margin-top: 0;">How to Access Your Account:</h3>
    <ol style="color: #1e3a8a;">{steps_html}</ol>
</div>
<p style="margin-top: 30px;">Best regards,<br><strong>Team LoomeroFlow</strong></p>
<hr style="margin: 30px 0; border: none; border-top: 1px solid {BORDER};">
<p style="font-size: 12px; color: #6b7280; text-align: center;">
    This email was sent to {escape(email)}. If you didn't request access to LoomeroFlow, please ignore this email.
</p>"""
    text_steps = "\n".join(f"{i}. {s}" for i, s in enumerate(steps, start=1))
    text_body = (
        f"Hi {user_name},\n\n"
        f"Your request to access LoomeroFlow has been approved.\n"
        f"You've been assigned the role of {role_label}.\n\n"
        f"Your access code: {access_code}\n\n"
        f"How to access your account:\n{text_steps}\n\n"
        f"{SIGNATURE_TEXT}"
    )
    return subject, _base_layout(content), text_body


def milestone_approved(
    recipient_name: str | None,
    milestone_title: str,
    project_title: str,
    feedback: str | None = None,
) -> tuple[str, str, str]:
    """Sent to an intern when a mentor approves their milestone."""
    name = recipient_name or "there"
    subject = f"\U0001f389 Milestone Approved: {milestone_title}"
    feedback_html = (
        _callout("Mentor Feedback:", feedback, "#f0f9ff", "#0ea5e9", "#0c4a6e", "#164e63") if feedback else ""
    )
    content = f"""\
<h1 style="color: {BRAND}; text-align: center;">Milestone Approved!</h1>
<p>Hi {escape(name)},</p>
<p>Great news! Your milestone "<strong>{escape(milestone_title)}</strong>" for project "<strong>{escape(project_title)}</strong>" has been approved.</p>
{feedback_html}
<p>Keep up the excellent work!</p>
{SIGNATURE_HTML}"""
    text_body = (
        f"Hi {name},\n\n"
        f'Great news! Your milestone "{milestone_title}" for project "{project_title}" has been approved.\n\n'
        + (f"Mentor feedback:\n{feedback}\n\n" if feedback else "")
        + f"Keep up the excellent work!\n\n{SIGNATURE_TEXT}"
    )
    return subject, _base_layout(content), text_body


def milestone_rejected(
    recipient_name: str | None,
    milestone_title: str,
    project_title: str,
    feedback: str | None = None,
) -> tuple[str, str, str]:
    """Sent to an intern when a mentor asks for revisions."""
    name = recipient_name or "there"
    subject = f"\U0001f4dd Milestone Needs Revision: {milestone_title}"
    feedback_html = (
        _callout("Mentor Feedback:", feedback, "#fef7cd", "#f59e0b", "#92400e", "#78350f") if feedback else ""
    )
    content = f"""\
<h1 style="color: {BRAND_MUTED}; text-align: center;">Milestone Needs Revision</h1>
<p>Hi {escape(name)},</p>
<p>Your milestone "<strong>{escape(milestone_title)}</strong>" for project "<strong>{escape(project_title)}</strong>" needs some revisions.</p>
{feedback_html}
<p>Please review the feedback and resubmit your milestone when ready.</p>
{SIGNATURE_HTML}"""
    text_body = (
        f"Hi {name},\n\n"
        f'Your milestone "{milestone_title}" for project "{project_title}" needs some revisions.\n\n'
        + (f"Mentor feedback:\n{feedback}\n\n" if feedback else "")
        + f"Please review the feedback and resubmit your milestone when ready.\n\n{SIGNATURE_TEXT}"
    )
    return subject, _base_layout(content), text_body


def milestone_submitted(
    recipient_name: str | None,
    milestone_title: str,
    project_title: str,
    submission_notes: str | None = None,
) -> tuple[str, str, str]:
    """Sent to mentors when an intern submits a milestone for review."""
    name = recipient_name or "Mentor"
    subject = f"\U0001f4cb New Milestone Submission: {milestone_title}"
    notes_html = (
        _callout("Submission Notes:", submission_notes, "#f0f9ff", "#0ea5e9", "#0c4a6e", "#164e63")
        if submission_notes
        else ""
    )
    content = f"""\
<h1 style="color: {BRAND}; text-align: center;">New Milestone Submission</h1>
<p>Hi {escape(name)},</p>
<p>A new milestone has been submitted for review:</p>
<div style="background-color: #f8fafc; padding: 20px; border-radius: 8px; margin: 20px 0; border: 1px solid #e2e8f0;">
    <h3 style="color: #1e293b; margin: 0 0 10px 0;">Milestone Details:</h3>
    <p><strong>Milestone:</strong> {escape(milestone_title)}</p>
    <p><strong>Project:</strong> {escape(project_title)}</p>
</div>
{notes_html}
<p>Please review and provide feedback when ready.</p>
{SIGNATURE_HTML}"""
    text_body = (
        f"Hi {name},\n\n"
        f"A new milestone has been submitted for review.\n"
        f"Milestone: {milestone_title}\nProject: {project_title}\n\n"
        + (f"Submission notes:\n{submission_notes}\n\n" if submission_notes else "")
        + f"Please review and provide feedback when ready.\n\n{SIGNATURE_TEXT}"
    )
    return subject, _base_layout(content), text_body


def task_assigned(
    recipient_name: str | None,
    task_title: str,
    task_description: str | None,
    mentor_name: str | None,
    due_date: str | None = None,
    priority: str = "medium",
) -> tuple[str, str, str]:
    """Sent to an intern when a mentor assigns them a task."""
    name = recipient_name or "there"
    mentor = mentor_name or "Your mentor"
    subject = f"\U0001f4cc New Task Assigned: {task_title}"
    due_html = f"<p><strong>Due:</strong> {escape(due_date)}</p>" if due_date else ""
    description_html = (
        _callout("Description:", task_description, "#f8fafc", "#94a3b8", "#1e293b", "#334155")
        if task_description
        else ""
    )
    content = f"""\
<h1 style="color: {BRAND}; text-align: center;">New Task Assigned</h1>
<p>Hi {escape(name)},</p>
<p>{escape(mentor)} assigned you a new task: <strong>{escape(task_title)}</strong>.</p>
<p><strong>Priority:</strong> {escape(priority.capitalize())}</p>
{due_html}
{description_html}
{SIGNATURE_HTML}"""
    text_body = (
        f"Hi {name},\n\n{mentor} assigned you a new task: {task_title}.\n"
        f"Priority: {priority.capitalize()}\n"
        + (f"Due: {due_date}\n" if due_date else "")
        + (f"\n{task_description}\n" if task_description else "")
        + f"\n{SIGNATURE_TEXT}"
    )
    return subject, _base_layout(content), text_body
