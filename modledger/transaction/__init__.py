# modledger/transaction/__init__.py
from .file_transaction import FileTransaction, TransactionState

__all__ = ["FileTransaction", "TransactionState"]
