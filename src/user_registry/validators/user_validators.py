"""
Validation rules for user input.

The is_valid_* functions are pure and only log at DEBUG; they answer yes/no
and never say why to the caller. `check_email_exists` needs a session and
raises instead of returning a boolean, so a duplicate cannot be ignored by
accident inside a unit of work.
"""

import logging
import re

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from user_registry.exceptions.base import DuplicateEmailError
from user_registry.models.user import MAX_AGE, MIN_AGE, User

logger = logging.getLogger(__name__)

MIN_ID = 1

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,7}"
)

# Optional sign and ASCII digits only: no decimals, separators or underscores.
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def is_valid_name(name: str | None) -> bool:
    if name is None or not name.strip():
        logger.debug("validation.name_empty")
        return False

    # runs of Unicode letters (str.isalpha) separated by single spaces;
    # an empty part means a leading, trailing or doubled space
    if not all(part.isalpha() for part in name.split(" ")):
        logger.debug("validation.name_invalid_format", extra={"value": name})
        return False

    return True


def is_valid_email(email: str | None) -> bool:
    if not email:
        logger.debug("validation.email_empty")
        return False

    if not EMAIL_PATTERN.fullmatch(email):
        logger.debug("validation.email_invalid_format", extra={"value": email})
        return False

    return True


def is_valid_age(age: int | None) -> bool:
    if age is None or not (MIN_AGE <= age <= MAX_AGE):
        logger.debug("validation.age_out_of_range", extra={"value": age, "min": MIN_AGE, "max": MAX_AGE})
        return False
    return True


def is_valid_id(user_id: int | None) -> bool:
    if user_id is None:
        logger.debug("validation.id_missing")
        return False

    if user_id < MIN_ID:
        logger.debug("validation.id_below_minimum", extra={"value": user_id, "min": MIN_ID})
        return False

    return True


def parse_int(value: str | None, *, bits: int = 64) -> int:
    """
    Parse a base-10 integer typed by a user.

    Surrounding whitespace is ignored. Anything other than an optional sign
    followed by ASCII digits, or a value that does not fit in a signed
    `bits`-wide integer, raises ValueError.

    >>> parse_int(" 42 ")
    42
    >>> parse_int("4.2")
    Traceback (most recent call last):
    ...
    ValueError: invalid integer: '4.2'
    """
    text = (value or "").strip()
    if not INTEGER_PATTERN.fullmatch(text):
        raise ValueError(f"invalid integer: {value!r}")

    number = int(text)
    limit = 1 << (bits - 1)
    if not (-limit <= number < limit):
        raise ValueError(f"integer out of {bits}-bit range: {value!r}")
    return number


async def check_email_exists(session: AsyncSession, email: str) -> None:
    """
    Raise DuplicateEmailError if a user with exactly this email exists.

    Runs inside the caller's transaction. The unique constraint on
    users.email remains the final authority if two writers race.
    """
    result = await session.execute(select(User.id).where(User.email == email).limit(1))
    if result.scalar_one_or_none() is not None:
        logger.info("validation.duplicate_email", extra={"email": email})
        raise DuplicateEmailError(email)
