from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .protocol import ProtocolRegistry  # noqa: F401
from .round import Round  # noqa: F401
from .participant import Participant, TicketBlock  # noqa: F401
from .claim import ClaimRecord  # noqa: F401
from .ledger import FundTransfer, LedgerAccount  # noqa: F401

__all__ = [
    "Base",
    "ProtocolRegistry",
    "Round",
    "Participant",
    "TicketBlock",
    "ClaimRecord",
    "FundTransfer",
    "LedgerAccount",
]
