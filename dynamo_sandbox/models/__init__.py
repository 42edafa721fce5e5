__all__ = [
    'StoreRecord',
    'WriteOutcome',
]
from .record.enums import WriteOutcome
from .record.model import StoreRecord
