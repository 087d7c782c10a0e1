from .mixins import private_message_mixin, PrivateMessageMixin  # noqa: F401
from .errors import PrivateMessageError, MessageNotFound, PersistenceError  # noqa: F401
