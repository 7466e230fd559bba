"""Business logic services for the Agora forum."""

from .credentials import CredentialStore
from .gate import LoginResult, RequestGate
from .reactions import ReactionAction, ReactionLedger, ReactionOutcome
from .sessions import SessionManager

__all__ = [
    "CredentialStore",
    "LoginResult",
    "RequestGate",
    "ReactionAction",
    "ReactionLedger",
    "ReactionOutcome",
    "SessionManager",
]
