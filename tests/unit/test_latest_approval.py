"""Ordering of the approval a certificate is dated from."""

import uuid

from sqlalchemy.dialects import postgresql

from loomero.certificates.service import latest_approval_query


def test_unreviewed_approvals_sort_last_on_postgres():
    query = latest_approval_query(uuid.uuid4(), uuid.uuid4())
    sql = str(query.compile(dialect=postgresql.dialect()))
    assert "reviewed_at DESC NULLS LAST" in sql
    assert "LIMIT" in sql
