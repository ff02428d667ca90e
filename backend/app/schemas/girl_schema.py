from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel


class GirlPublic(BaseModel):
    id: str
    girl_number: int
    city_id: Optional[str] = None
    username: str
    avatar_url: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    status: Literal["available", "busy", "offline"] = "offline"
    next_available_time: Optional[datetime] = None


class GirlListMeta(BaseModel):
    total: int
    timestamp: datetime


class GirlListResponse(BaseModel):
    ok: bool = True
    data: List[GirlPublic]
    meta: GirlListMeta
