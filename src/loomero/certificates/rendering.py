"""Certificate identifiers, date formatting and the downloadable HTML page."""

from __future__ import annotations

import re
import secrets
import time
from datetime import date, datetime
from html import escape
from typing import Any

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def new_certificate_id(now_ms: int | None = None) -> str:
    """CERT-<epoch ms>-<6 uppercase base36 chars>."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"CERT-{now_ms}-{suffix}"


def format_long_date(value: date | datetime) -> str:
    """Format like "January 5, 2026"."""
    return f"{value:%B} {value.day}, {value.year}"


def certificate_filename(intern_name: str, project_title: str) -> str:
    def _part(text: str) -> str:
        return re.sub(r"[^\w\-]", "", re.sub(r"\s+", "_", text))

    return f"Certificate_{_part(intern_name)}_{_part(project_title)}.html"


CERTIFICATE_CSS = """\
body { font-family: 'Georgia', serif; margin: 0; padding: 40px;
       background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
       min-height: 100vh; display: flex; align-items: center; justify-content: center; }
.certificate { background: white; padding: 60px; border-radius: 15px;
               box-shadow: 0 20px 40px rgba(0,0,0,0.1); text-align: center;
               max-width: 800px; border: 8px solid #f8f9fa; }
.header { border-bottom: 3px solid #667eea; padding-bottom: 20px; margin-bottom: 40px; }
.title { font-size: 48px; color: #2c3e50; margin: 0; font-weight: bold; }
.subtitle { font-size: 24px; color: #667eea; margin: 10px 0; }
.recipient { font-size: 36px; color: #2c3e50; margin: 30px 0; font-style: italic; }
.project { font-size: 28px; color: #34495e; margin: 20px 0; font-weight: bold; }
.details { margin: 40px 0; font-size: 18px; color: #555; }
.signature-section { display: flex; justify-content: space-between; margin-top: 60px;
                     border-top: 2px solid #ecf0f1; padding-top: 30px; }
.signature { text-align: center; }
.signature-line { border-bottom: 2px solid #34495e; width: 200px; margin: 20px auto 10px; }
.cert-id { font-size: 12px; color: #999; margin-top: 20px; }"""


def render_certificate_html(data: dict[str, Any]) -> str:
    """Render certificate_data into a standalone HTML document."""
    v = {key: escape(str(data.get(key, ""))) for key in (
        "internName", "projectTitle", "mentorName", "completionDate", "issueDate", "certificateId",
    )}
    return f"""\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Certificate of Completion</title>
  <style>
{CERTIFICATE_CSS}
  </style>
</head>
<body>
  <div class="certificate">
    <div class="header">
      <h1 class="title">Certificate of Completion</h1>
      <p class="subtitle">LoomeroFlow Internship Program</p>
    </div>
    <p style="font-size: 20px; margin: 30px 0;">This is to certify that</p>
    <div class="recipient">{v["internName"]}</div>
    <p style="font-size: 20px; margin: 30px 0;">has successfully completed the project</p>
    <div class="project">"{v["projectTitle"]}"</div>
    <div class="details">
      <p>Completed on: {v["completionDate"]}</p>
      <p>Under the mentorship of: {v["mentorName"]}</p>
    </div>
    <div class="signature-section">
      <div class="signature">
        <div class="signature-line"></div>
        <p>Program Director</p>
        <p>LoomeroFlow</p>
      </div>
      <div class="signature">
        <div class="signature-line"></div>
        <p>Mentor</p>
        <p>{v["mentorName"]}</p>
      </div>
    </div>
    <div class="cert-id">
      Certificate ID: {v["certificateId"]}<br>
      Issued on: {v["issueDate"]}
    </div>
  </div>
</body>
</html>
"""
