from pydantic import BaseModel, Field


class ProductOut(BaseModel):
    id: int
    identifier: str
    version: str
    arch: str


class ServiceOut(BaseModel):
    id: int
    name: str
    url: str = Field(..., description="Zypper plugin service URL")
    product: ProductOut


class ActivationOut(BaseModel):
    id: int
    system_id: int
    status: str
    service: ServiceOut
