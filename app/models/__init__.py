from app.models.user import User, UserRole
from app.models.wallet import Wallet
from app.models.wallet_transaction import WalletTransaction, LedgerType
from app.models.markup_rule import MarkupRule, MarkupType, RuleKind
from app.models.profit_transaction import ProfitTransaction
from app.models.pricing_tier import UserPricingTier, PricingTier
from app.models.billing_config import BillingConfig
from app.models.sms_log import SmsLog

__all__ = [
    "User",
    "UserRole",
    "Wallet",
    "WalletTransaction",
    "LedgerType",
    "MarkupRule",
    "MarkupType",
    "RuleKind",
    "ProfitTransaction",
    "UserPricingTier",
    "PricingTier",
    "BillingConfig",
    "SmsLog",
]
