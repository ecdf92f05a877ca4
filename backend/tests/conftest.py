import os
import sys
from typing import Optional

import pytest

# Add backend directory to path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__) + "/.."))

from marketplace_chat.application.commands.messages import (
    MarkThreadAsReadHandler,
    SendMessageHandler,
)
from marketplace_chat.application.commands.threads import FindOrCreateThreadHandler
from marketplace_chat.application.ports import AuthProfile
from marketplace_chat.application.queries.inbox import (
    ListClientInboxHandler,
    ListListerInboxHandler,
)
from marketplace_chat.application.queries.messages import ListMessagesHandler
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.entities import ChatMessage, ChatThread, Participant
from marketplace_chat.domain.entities.chat_thread import ThreadPropertySnapshot
from marketplace_chat.domain.enums import ParticipantType, SenderType
from marketplace_chat.domain.value_objects import MessageBody, UniqueEntityID
from marketplace_chat.infrastructure.memory import (
    InMemoryChatMessageRepository,
    InMemoryChatStore,
    InMemoryChatThreadRepository,
    InMemoryRealtimeService,
    StaticAuthService,
)
from marketplace_chat.infrastructure.realtime.realtime_message_repository import (
    RealtimeChatMessageRepository,
)

TEST_SECRET = "marketplace-chat-test-secret-0123456789abcdef"

BUYER_ID = "11111111-1111-4111-8111-111111111111"
LISTER_ID = "22222222-2222-4222-8222-222222222222"
OTHER_USER_ID = "33333333-3333-4333-8333-333333333333"
CONTACT_ID = "44444444-4444-4444-8444-444444444444"
ORG_ID = "55555555-5555-4555-8555-555555555555"
PROPERTY_ID = "66666666-6666-4666-8666-666666666666"
SECOND_PROPERTY_ID = "77777777-7777-4777-8777-777777777777"
MISSING_ID = "99999999-9999-4999-8999-999999999999"


class ChatWorld:
    """In-memory adapters seeded with one listing, a buyer, a lister and a lead contact."""

    def __init__(self, strict_profiles: bool = False):
        self.store = InMemoryChatStore(strict_profiles=strict_profiles)
        self.threads = InMemoryChatThreadRepository(self.store)
        self.messages = InMemoryChatMessageRepository(self.store)
        self.realtime = InMemoryRealtimeService()
        self.auth = StaticAuthService()

        self.store.add_property(
            PROPERTY_ID, title="Sunny loft", price=250000.0, currency="EUR", city="Lisbon"
        )
        self.store.add_property(SECOND_PROPERTY_ID, title="Garden house", city="Porto")
        self.store.add_profile(BUYER_ID, display_name="Bea Buyer")
        self.store.add_profile(LISTER_ID, display_name="Leo Lister")
        self.store.add_contact(CONTACT_ID, display_name="Carla Contact")

    # ==================== SESSION ====================

    def act_as(
        self,
        user_id: Optional[str] = None,
        org_id: Optional[str] = None,
        contact_id: Optional[str] = None,
    ) -> AuthProfile:
        self.auth.profile = AuthProfile(user_id=user_id, org_id=org_id, contact_id=contact_id)
        return self.auth.profile

    def sign_out(self) -> None:
        self.auth.profile = None

    # ==================== SEEDING ====================

    def open_thread(
        self,
        buyer_id: str = BUYER_ID,
        lister_id: str = LISTER_ID,
        property_id: Optional[str] = PROPERTY_ID,
        org_id: Optional[str] = ORG_ID,
    ) -> str:
        """A buyer/lister thread, as FindOrCreateThread would create it."""
        return self._add_thread(
            participants=[
                self.store.participant_for_user(buyer_id),
                self.store.participant_for_user(lister_id),
            ],
            property_id=property_id,
            org_id=org_id,
            created_by=buyer_id,
        )

    def contact_thread(
        self,
        contact_id: str = CONTACT_ID,
        lister_id: str = LISTER_ID,
        property_id: Optional[str] = PROPERTY_ID,
        org_id: Optional[str] = ORG_ID,
    ) -> str:
        """A lead-contact/lister thread."""
        return self._add_thread(
            participants=[
                self.store.participant_for_user(lister_id),
                Participant(id=contact_id, type=ParticipantType.CONTACT, display_name="Carla Contact"),
            ],
            property_id=property_id,
            org_id=org_id,
            created_by=lister_id,
            contact_id=contact_id,
        )

    def seed_message(
        self,
        thread_id: str,
        sender_type: SenderType,
        sender_id: Optional[str],
        body: str = "Hello",
    ) -> ChatMessage:
        message = ChatMessage.create(
            thread_id=UniqueEntityID(thread_id),
            sender_type=sender_type,
            sender_id=sender_id,
            body=MessageBody.create(body),
            created_at=self.store.now(),
        )
        self.store.messages.setdefault(thread_id, []).append(message)
        self.store.threads[thread_id].record_message(message)
        return message

    def _add_thread(self, participants, property_id, org_id, created_by, contact_id=None) -> str:
        snapshot = None
        if property_id:
            snapshot = self.store.properties.get(property_id) or ThreadPropertySnapshot(id=property_id)
        thread = ChatThread(
            id=UniqueEntityID.generate(),
            org_id=org_id,
            property=snapshot,
            contact_id=contact_id,
            created_by=created_by,
            created_at=self.store.now(),
            initial_participants=participants,
        )
        self.store.add_thread(thread)
        return str(thread.id)

    # ==================== HANDLERS ====================

    def publishing_messages(self) -> RealtimeChatMessageRepository:
        return RealtimeChatMessageRepository(self.messages, self.realtime)

    def send_message(self) -> SendMessageHandler:
        return SendMessageHandler(self.publishing_messages(), self.threads, self.auth)

    def list_messages(self) -> ListMessagesHandler:
        return ListMessagesHandler(self.messages, self.threads, self.auth)

    def mark_thread_as_read(self) -> MarkThreadAsReadHandler:
        return MarkThreadAsReadHandler(self.messages, self.threads, self.auth)

    def find_or_create_thread(self) -> FindOrCreateThreadHandler:
        return FindOrCreateThreadHandler(self.threads, self.auth)

    def lister_inbox(self) -> ListListerInboxHandler:
        return ListListerInboxHandler(self.threads, self.auth)

    def client_inbox(self) -> ListClientInboxHandler:
        return ListClientInboxHandler(self.threads, self.auth)


@pytest.fixture(autouse=True)
def service_auth(monkeypatch):
    """Sign and verify tokens with a fixed test secret."""
    monkeypatch.setattr(Config, "SERVICE_AUTH_SECRET", TEST_SECRET)
    return TEST_SECRET


@pytest.fixture()
def world():
    """A fresh in-memory chat backend per test."""
    return ChatWorld()
