from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    code: str = Field(min_length=1)


class AdminLoginRequest(BaseModel):
    email: str = Field(min_length=1)
    secret: str | None = None


class LinkAccountRequest(BaseModel):
    linking_code: str = Field(min_length=1)


class UserResponse(BaseModel):
    id: str
    name: str | None = None
    email: str | None = None
    role: str
    phone: str | None = None
    is_linked: bool
    linked_at: str | None = None
    last_signed_in: str | None = None

    model_config = {"from_attributes": True}
