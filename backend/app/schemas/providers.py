# backend/app/schemas/providers.py

from typing import Optional
from pydantic import BaseModel


class ProviderRead(BaseModel):
    id: int
    name: str
    slug: str
    phone: Optional[str] = None
    whatsapp_number: Optional[str] = None

    model_config = {"from_attributes": True}


class ProviderContactUpdate(BaseModel):
    """Only contact fields are mutable."""
    phone: Optional[str] = None
    whatsapp_number: Optional[str] = None
