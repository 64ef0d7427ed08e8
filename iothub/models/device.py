"""Device data model"""

from typing import Optional

from pydantic import BaseModel


class Device(BaseModel):
    """A registered device. device_key is globally unique and used for dispatch."""
    id: int
    owner_email: str
    name: str
    device_key: str
    created_at: Optional[str] = None
