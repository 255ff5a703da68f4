
# user_registry/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # App-level errors (RepositoryError, DuplicateEmailError, ...) + ErrorKind
# │   ├── integrity_classifier.py    # ConstraintKind of an IntegrityError (unique, not null, ...)
# │   └── mapper.py                  # Raw failure -> ErrorKind, integrity details for logs

from .base import (
    BusinessRuleError,
    DuplicateEmailError,
    ErrorKind,
    NotFoundError,
    RepositoryError,
    StoreError,
)

__all__ = [
    "BusinessRuleError",
    "DuplicateEmailError",
    "ErrorKind",
    "NotFoundError",
    "RepositoryError",
    "StoreError",
]
