"""
ENTITIES - Domain objects with identity

- ChatThread: a conversation anchored to a listing, owns its participants
- ChatMessage: one message, status derived from delivery/read timestamps
- Participant: a user or contact attached to a thread
"""

from marketplace_chat.domain.entities.participant import Participant
from marketplace_chat.domain.entities.chat_message import ChatMessage
from marketplace_chat.domain.entities.chat_thread import ChatThread, ThreadPropertySnapshot

__all__ = [
    "Participant",
    "ChatMessage",
    "ChatThread",
    "ThreadPropertySnapshot",
]
