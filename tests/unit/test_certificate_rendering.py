"""Unit tests for certificate ids, dates and HTML rendering."""

import re
from datetime import date, datetime, timezone

from loomero.certificates.rendering import (
    certificate_filename,
    format_long_date,
    new_certificate_id,
    render_certificate_html,
)


class TestCertificateId:
    def test_format(self):
        cert_id = new_certificate_id(now_ms=1767225600000)
        assert re.fullmatch(r"CERT-1767225600000-[0-9A-Z]{6}", cert_id)

    def test_uses_current_time_by_default(self):
        assert re.fullmatch(r"CERT-\d{13}-[0-9A-Z]{6}", new_certificate_id())


class TestFormatting:
    def test_long_date_has_no_zero_padding(self):
        assert format_long_date(date(2026, 1, 5)) == "January 5, 2026"
        assert format_long_date(datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)) == "October 19, 2026"

    def test_filename(self):
        assert certificate_filename("Ivy  Intern", "API: v2 / Tracker") == "Certificate_Ivy_Intern_API_v2__Tracker.html"


class TestRenderCertificate:
    DATA = {
        "internName": "Ivy Intern",
        "projectTitle": "Tracker",
        "mentorName": "Max Mentor",
        "completionDate": "October 1, 2026",
        "issueDate": "October 2, 2026",
        "certificateId": "CERT-1-ABCDEF",
    }

    def test_contains_fields(self):
        html = render_certificate_html(self.DATA)
        assert html.startswith("<!DOCTYPE html>")
        for value in self.DATA.values():
            assert value in html

    def test_escapes_values(self):
        html = render_certificate_html({**self.DATA, "internName": "<img src=x onerror=alert(1)>"})
        assert "<img" not in html
        assert "&lt;img" in html
