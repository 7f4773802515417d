from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.schemas.wallet import WalletTransactionOut
from app.services.distribution import DistributionType


class DistributeBalanceRequest(BaseModel):
    upstream_credits: Decimal = Field(
        validation_alias=AliasChoices("upstream_credits", "arkesel_credits", "arkeselCredits")
    )
    distribution_type: DistributionType = Field(
        default=DistributionType.MANUAL,
        validation_alias=AliasChoices("distribution_type", "distributionType"),
    )


class DistributionOut(BaseModel):
    upstream_credits: Decimal = Field(validation_alias=AliasChoices("upstream_credits", "arkesel_credits"))
    reseller_credits: Decimal
    conversion_rate: Decimal
    transaction: WalletTransactionOut


class AutoDistributionOut(BaseModel):
    performed: bool
    reason: Optional[str] = None
    upstream_balance: Optional[Decimal] = None
    upstream_credits: Optional[Decimal] = None
    reseller_credits: Optional[Decimal] = None
    conversion_rate: Optional[Decimal] = None
    transaction: Optional[WalletTransactionOut] = None


class UpstreamBalanceOut(BaseModel):
    balance: Decimal
    synced_at: str


class DistributionHistoryOut(BaseModel):
    items: list[WalletTransactionOut]
    total: int
    page: int
    limit: int
    pages: int


class AutoRechargeConfig(BaseModel):
    auto_recharge: bool = False
    auto_recharge_amount: Decimal = Decimal("0")
    auto_recharge_threshold: Decimal = Decimal("0")


class AutoRechargeConfigOut(AutoRechargeConfig):
    model_config = ConfigDict(from_attributes=True)
