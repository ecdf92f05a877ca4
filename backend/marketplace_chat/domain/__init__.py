"""
DOMAIN LAYER - Chat threads, messages and participants

This layer contains:
- Entities: ChatThread, ChatMessage, Participant
- Value Objects: UniqueEntityID, MessageBody
- Enums: sender/participant types, message and thread status
- Exceptions: ChatError taxonomy plus InvariantViolationError

RULES:
1. NO framework imports (no FastAPI, Prisma, Pydantic, etc.)
2. NO I/O operations (no database, no HTTP, no Redis)
3. Only depends on Python stdlib
"""
