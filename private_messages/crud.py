from .models import AsyncSessionLocal
from .models.users import User
from .models.messages import Message
from .mixins import commit_or_raise
from sqlalchemy import select, func

async def create_user(username: str, display_name: str | None = None):
    async with AsyncSessionLocal() as session:
        user = User(username=username, display_name=display_name)
        session.add(user)
        await commit_or_raise(session)
        await session.refresh(user)
        return user

async def get_user_by_id(user_id: int):
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User).where(User.id==user_id))
        return q.scalars().first()

# messaging
async def send_message(sender_id:int, recipient_id:int, content:str):
    async with AsyncSessionLocal() as session:
        m = Message(sender_id=sender_id, recipient_id=recipient_id, content=content)
        session.add(m)
        await commit_or_raise(session)
        await session.refresh(m)
        return m

async def read_message(message_id:int, reader):
    async with AsyncSessionLocal() as session:
        return await Message.read_message(session, message_id, reader)

async def get_message(message_id:int, user):
    """Participant lookup that leaves read state alone."""
    async with AsyncSessionLocal() as session:
        return await Message.find_for_participant(session, message_id, user)

async def mark_deleted(message, user):
    async with AsyncSessionLocal() as session:
        await message.mark_deleted(session, user)

async def mark_message_deleted(message_id:int, user):
    async with AsyncSessionLocal() as session:
        m = await Message.find_for_participant(session, message_id, user)
        await m.mark_deleted(session, user)

async def list_inbox(user, unread_only:bool = False):
    async with AsyncSessionLocal() as session:
        q = Message.received_by(user)
        if unread_only:
            q = Message.unread(q)
        res = await session.execute(q.order_by(Message.created_at.desc(), Message.id.desc()))
        return res.scalars().all()

async def list_sent(user):
    async with AsyncSessionLocal() as session:
        q = Message.sent_by(user).order_by(Message.created_at.desc(), Message.id.desc())
        res = await session.execute(q)
        return res.scalars().all()

async def list_dialog(user, peer):
    async with AsyncSessionLocal() as session:
        q = Message.between(user, peer).order_by(Message.created_at.asc(), Message.id.asc())
        res = await session.execute(q)
        return res.scalars().all()

async def count_unread(user) -> int:
    async with AsyncSessionLocal() as session:
        q = Message.unread(Message.received_by(user, select(func.count(Message.id))))
        res = await session.execute(q)
        return res.scalar_one()
