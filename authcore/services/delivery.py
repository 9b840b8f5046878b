"""Out-of-band delivery of raw reset tokens"""
import logging
import threading
from typing import List, NamedTuple

logger = logging.getLogger(__name__)


class ResetTokenSender:
    """Hands a raw reset token to the user's registered address"""

    def send(self, email: str, token: str):
        raise NotImplementedError


class OutboundMessage(NamedTuple):
    email: str
    token: str


class OutboxSender(ResetTokenSender):
    """
    Keeps messages in memory for a mail worker (or a test) to pick up.
    The token is only ever held here, never in the account store or the logs.
    """

    def __init__(self):
        self._messages: List[OutboundMessage] = []
        self._lock = threading.Lock()

    def send(self, email: str, token: str):
        with self._lock:
            self._messages.append(OutboundMessage(email, token))
        logger.info('Queued password reset message')

    def drain(self) -> List[OutboundMessage]:
        """Return and remove all queued messages"""
        with self._lock:
            messages, self._messages = self._messages, []
        return messages

    def last_token_for(self, email: str):
        with self._lock:
            for message in reversed(self._messages):
                if message.email == email:
                    return message.token
        return None
