from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import datetime


# Single audit trail entry
class LogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ts: Optional[datetime] = None
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None


# Paginated audit trail, newest first
class LogPage(BaseModel):
    items: List[LogOut]
    total: int
    page: int
    page_size: int
