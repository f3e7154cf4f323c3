"""Access code generation.

Codes are 6-digit numeric strings (100000-999999), generated server-side
with a cryptographic random source so they can be typed on a phone keypad.
"""

from __future__ import annotations

import secrets

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from loomero.db.models import AccessCode, ApprovedUser

ACCESS_CODE_MIN = 100_000
ACCESS_CODE_MAX = 999_999
ACCESS_CODE_LENGTH = 6


def generate_access_code() -> str:
    """Generate a random 6-digit access code."""
    return str(ACCESS_CODE_MIN + secrets.randbelow(ACCESS_CODE_MAX - ACCESS_CODE_MIN + 1))


def normalize_access_code(code: str) -> str:
    """Strip whitespace and inner spaces users paste from email clients."""
    return "".join(code.split())


async def generate_unique_access_code(db: AsyncSession) -> str:
    """Generate a code not currently held by any approved user or unused access code."""
    for _ in range(10):
        code = generate_access_code()
        approved = await db.execute(select(ApprovedUser.id).where(ApprovedUser.access_code == code))
        if approved.first() is not None:
            continue
        issued = await db.execute(
            select(AccessCode.id).where(AccessCode.code == code, AccessCode.is_used.is_(False))
        )
        if issued.first() is None:
            return code
    raise RuntimeError("Failed to generate unique access code after 10 attempts")
