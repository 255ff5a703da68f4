from .base import Base
from .gateway import TransactionGateway, TransactionResult
from .session import Database

__all__ = ["Base", "Database", "TransactionGateway", "TransactionResult"]
