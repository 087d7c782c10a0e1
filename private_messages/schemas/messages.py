from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

class MessageIn(BaseModel):
    recipient_id: int
    content: str

class MessageOut(BaseModel):
    id: int
    sender_id: int
    recipient_id: int
    content: str
    created_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    sender_deleted: bool = False
    recipient_deleted: bool = False

    model_config = ConfigDict(from_attributes=True)

class UnreadCountOut(BaseModel):
    unread: int

class ActionOkOut(BaseModel):
    ok: bool = True
