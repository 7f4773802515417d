from fastapi import APIRouter
from app.api.v1.endpoints import pricing, markup_rules, balance, wallet, admin

router = APIRouter()

router.include_router(pricing.router, prefix="/pricing", tags=["pricing"])
router.include_router(markup_rules.router, prefix="/markup-rules", tags=["markup-rules"])
router.include_router(balance.router, prefix="/balance", tags=["balance"])
router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
