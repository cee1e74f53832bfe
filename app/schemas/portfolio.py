from pydantic import BaseModel


class PortfolioItemCreate(BaseModel):
    title: str
    description: str | None = None
    image_url: str
    category: str | None = None
    display_order: int = 0


class PortfolioItemUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    display_order: int | None = None
    is_active: bool | None = None


class PortfolioItemResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    image_url: str
    category: str | None = None
    display_order: int
    is_active: bool

    model_config = {"from_attributes": True}
