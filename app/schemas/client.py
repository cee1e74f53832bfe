from pydantic import BaseModel, EmailStr


class ClientCreate(BaseModel):
    name: str
    email: EmailStr
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


class ClientResponse(BaseModel):
    id: str
    name: str | None = None
    email: str | None = None
    role: str
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    linking_code: str | None = None
    is_linked: bool
    linked_at: str | None = None
    created_at: str

    model_config = {"from_attributes": True}


class AccessLogResponse(BaseModel):
    id: str
    client_id: str
    action: str
    details: str | None = None
    ip_address: str | None = None
    created_at: str

    model_config = {"from_attributes": True}
