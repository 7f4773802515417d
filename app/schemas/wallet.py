from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from app.models.wallet_transaction import LedgerType


class WalletOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    balance: Decimal
    is_locked: bool


class WalletTransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: Decimal
    balance_after: Decimal
    entry_type: LedgerType
    reference: str
    description: str
    details: Optional[dict[str, Any]] = None
    created_at: datetime
