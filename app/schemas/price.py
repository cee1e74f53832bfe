from pydantic import BaseModel, Field


class PriceSettingUpsert(BaseModel):
    item_type: str = Field(min_length=1)
    price: int = Field(ge=0)
    description: str | None = None


class PriceSettingResponse(BaseModel):
    id: str
    item_type: str
    price: int
    description: str | None = None
    is_active: bool
    updated_at: str

    model_config = {"from_attributes": True}
