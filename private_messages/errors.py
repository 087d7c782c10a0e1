class PrivateMessageError(Exception):
    """Base class for errors raised by the message lifecycle."""


class MessageNotFound(PrivateMessageError, LookupError):
    """No message with this id has the requesting user as sender or recipient.

    A missing message and someone else's message are reported the same way.
    """

    def __init__(self, message_id):
        super().__init__(f'message {message_id} not found')
        self.message_id = message_id


class PersistenceError(PrivateMessageError):
    """The database rejected a save or delete of a message."""
