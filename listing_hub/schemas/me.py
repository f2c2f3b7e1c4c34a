from pydantic import BaseModel


class MeOut(BaseModel):
    account_id: str
    email: str
    role: str
    admin_level: str | None
    subscription_tier: str
    tenant_id: str
    country_code: str | None
