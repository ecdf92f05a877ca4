"""
Prisma (PostgreSQL) adapters.

Import the repositories from their modules; query_builder stays importable
without a generated Prisma client.
"""
