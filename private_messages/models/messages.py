from sqlalchemy import Column, Integer, Text, DateTime, func
from . import Base
from ..mixins import PrivateMessageMixin

class Message(PrivateMessageMixin, Base):
    __tablename__ = 'messages'
    id = Column(Integer, primary_key=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
