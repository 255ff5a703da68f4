from .user_validators import (
    check_email_exists,
    is_valid_age,
    is_valid_email,
    is_valid_id,
    is_valid_name,
    parse_int,
)

__all__ = [
    "check_email_exists",
    "is_valid_age",
    "is_valid_email",
    "is_valid_id",
    "is_valid_name",
    "parse_int",
]
