"""Domain errors raised by services and auth guards."""
from typing import List


class LoginRequired(Exception):
    """Raised when a protected page or action is reached without a session."""


class SignupRejected(Exception):
    def __init__(self, messages: List[str]):
        super().__init__("; ".join(messages))
        self.messages = messages


class InvalidCredentials(Exception):
    pass


class EventRejected(Exception):
    def __init__(self, messages: List[str]):
        super().__init__("; ".join(messages))
        self.messages = messages


class EventNotFound(Exception):
    pass


class NotEventOwner(Exception):
    pass
