"""Translate Prisma failures into InfrastructureError."""

import logging
from contextlib import contextmanager

from prisma.errors import PrismaError

from marketplace_chat.domain.exceptions import InfrastructureError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(action: str):
    try:
        yield
    except PrismaError as e:
        logger.error(f"[Prisma] Failed to {action}: {e}")
        raise InfrastructureError(f"Storage failure while trying to {action}", e) from e
