from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

# Inbound fields are optional so that presence is checked by the handlers,
# which answer with the route's own validation message.
class PostIn(BaseModel):
    title: Optional[str] = None
    contents: Optional[str] = None

class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    contents: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CommentIn(BaseModel):
    text: Optional[str] = None

class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    post_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class MessageOut(BaseModel):
    message: str
