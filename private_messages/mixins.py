"""
Private message capability for declarative models.

A model opts in by inheriting the mixin built by ``private_message_mixin``
next to ``Base``::

    class Message(private_message_mixin(User), Base):
        __tablename__ = 'messages'
        id = Column(Integer, primary_key=True)

The mixin adds the sender/recipient columns and relationships, the read
timestamp, the two per-participant delete flags, the named filters and the
read/delete lifecycle.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, select, or_, and_
from sqlalchemy.exc import NoResultFound, InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import declared_attr, relationship

from .errors import MessageNotFound, PersistenceError

logger = logging.getLogger(__name__)


def user_id(user):
    """Accept either a user record or a bare user id."""
    return getattr(user, 'id', user)


async def commit_or_raise(session):
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f'Message write failed: {e}')
        raise PersistenceError(str(e)) from e


def private_message_mixin(user_type='User', user_table=None):
    """Build a mixin whose sender and recipient reference ``user_type``.

    ``user_type`` is a mapped class or its name in the declarative registry.
    ``user_table`` defaults to the class's ``__tablename__``, or ``users`` when
    only a name is given.
    """
    if user_table is None:
        user_table = getattr(user_type, '__tablename__', 'users')

    class PrivateMessage:
        @declared_attr
        def sender_id(cls):
            return Column(Integer, ForeignKey(f'{user_table}.id'), index=True, nullable=False)

        @declared_attr
        def recipient_id(cls):
            return Column(Integer, ForeignKey(f'{user_table}.id'), index=True, nullable=False)

        @declared_attr
        def read_at(cls):
            return Column(DateTime(timezone=True), nullable=True)

        @declared_attr
        def sender_deleted(cls):
            return Column(Boolean, default=False, nullable=False)

        @declared_attr
        def recipient_deleted(cls):
            return Column(Boolean, default=False, nullable=False)

        # joined so the participants stay readable after the session closes
        @declared_attr
        def sender(cls):
            return relationship(user_type, foreign_keys=lambda: [cls.sender_id], lazy='joined')

        @declared_attr
        def recipient(cls):
            return relationship(user_type, foreign_keys=lambda: [cls.recipient_id], lazy='joined')

        # named filters; each extends ``query`` or starts a fresh select
        @classmethod
        def already_read(cls, query=None):
            query = select(cls) if query is None else query
            return query.where(cls.read_at.is_not(None))

        @classmethod
        def unread(cls, query=None):
            query = select(cls) if query is None else query
            return query.where(cls.read_at.is_(None))

        @classmethod
        def sent_by(cls, user, query=None):
            query = select(cls) if query is None else query
            return query.where(cls.sender_id == user_id(user), cls.sender_deleted == False)  # noqa: E712

        @classmethod
        def received_by(cls, user, query=None):
            query = select(cls) if query is None else query
            return query.where(cls.recipient_id == user_id(user), cls.recipient_deleted == False)  # noqa: E712

        @classmethod
        def between(cls, user, peer, query=None):
            uid, pid = user_id(user), user_id(peer)
            query = select(cls) if query is None else query
            return query.where(or_(
                and_(cls.sender_id == uid, cls.recipient_id == pid, cls.sender_deleted == False),  # noqa: E712
                and_(cls.sender_id == pid, cls.recipient_id == uid, cls.recipient_deleted == False),  # noqa: E712
            ))

        @classmethod
        async def find_for_participant(cls, session, message_id, user):
            """Load a message only if ``user`` sent or received it."""
            uid = user_id(user)
            q = select(cls).where(cls.id == message_id, or_(cls.sender_id == uid, cls.recipient_id == uid))
            res = await session.execute(q)
            try:
                return res.scalars().one()
            except NoResultFound as e:
                raise MessageNotFound(message_id) from e

        @classmethod
        async def read_message(cls, session, message_id, reader):
            """Return the message, stamping ``read_at`` on the recipient's first read.

            Raises MessageNotFound when the message does not exist or ``reader``
            is neither its sender nor its recipient.
            """
            message = await cls.find_for_participant(session, message_id, reader)
            if message.read_at is None and message.recipient_id == user_id(reader):
                message.read_at = datetime.now(timezone.utc)
                await commit_or_raise(session)
                logger.info(f'Message {message.id} read by recipient {message.recipient_id}')
            return message

        def is_read(self):
            """True once the recipient has read the message."""
            return self.read_at is not None

        async def mark_deleted(self, session, user):
            """Flag the message deleted for ``user``; destroy it once both sides have."""
            uid = user_id(user)
            session.add(self)
            # the instance may come from an earlier session; decide on the stored flags
            try:
                await session.refresh(self, ['sender_deleted', 'recipient_deleted'])
            except InvalidRequestError as e:
                raise MessageNotFound(self.id) from e
            if self.sender_id == uid:
                self.sender_deleted = True
            if self.recipient_id == uid:
                self.recipient_deleted = True
            if self.sender_deleted and self.recipient_deleted:
                await session.delete(self)
                await commit_or_raise(session)
                logger.info(f'Message {self.id} destroyed')
            else:
                await commit_or_raise(session)
                logger.info(f'Message {self.id} flagged deleted by user {uid}')

    PrivateMessage.__name__ = 'PrivateMessageMixin'
    return PrivateMessage


PrivateMessageMixin = private_message_mixin()
