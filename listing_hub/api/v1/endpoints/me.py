from fastapi import APIRouter, Depends

from listing_hub.schemas.me import MeOut
from listing_hub.services.identity import Principal, get_principal

router = APIRouter()

@router.get("/me", response_model=MeOut)
async def me(principal: Principal = Depends(get_principal)) -> MeOut:
    return MeOut(
        account_id=principal.account_id,
        email=principal.email,
        role=principal.role,
        admin_level=principal.admin_level,
        subscription_tier=principal.subscription_tier,
        tenant_id=principal.tenant_id,
        country_code=principal.country_code,
    )
