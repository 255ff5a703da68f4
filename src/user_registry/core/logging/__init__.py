# src/user_registry/core/logging/
# ├─ __init__.py            # public API: setup_logging, operation id helpers
# ├─ builder.py             # make_dict_config(settings) + setup_logging(settings)
# ├─ formatters.py          # JsonFormatter, ColorFormatter
# ├─ filters.py             # OperationIdFilter, RedactFilter (+ contextvar helpers)
# └─ handlers.py            # handler config factories used by the builder

from .builder import setup_logging, make_dict_config
from .filters import (
    OperationIdFilter,
    RedactFilter,
    get_operation_id,
    new_operation_id,
    reset_operation_id,
    set_operation_id,
)

__all__ = [
    "setup_logging",
    "make_dict_config",
    "OperationIdFilter",
    "RedactFilter",
    "get_operation_id",
    "new_operation_id",
    "reset_operation_id",
    "set_operation_id",
]
