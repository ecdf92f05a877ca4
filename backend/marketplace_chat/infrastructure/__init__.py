"""
INFRASTRUCTURE LAYER - Adapters for the application ports

- persistence: Prisma (PostgreSQL) thread and message repositories
- realtime: Redis pub/sub transport and the publishing repository decorator
- auth: JWT-backed AuthService
- memory: in-process adapters for tests and embedding
"""
