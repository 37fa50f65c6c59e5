"""Bill domain exports"""

from .exceptions import AccessDeniedError, BillError, BillNotFoundError, DuplicateBillError, EncodingError
from .hashing import generate_bill_hash, verify_bill_hash
from .models import Bill, BillCreateInput, BillType, BlockchainStatus
from .service import BillService

__all__ = [
    "AccessDeniedError",
    "Bill",
    "BillCreateInput",
    "BillError",
    "BillNotFoundError",
    "BillService",
    "BillType",
    "BlockchainStatus",
    "DuplicateBillError",
    "EncodingError",
    "generate_bill_hash",
    "verify_bill_hash",
]
