"""
Development entry point for the marketplace chat API.

Usage:
    python run_fastapi.py

Or with uvicorn directly:
    uvicorn marketplace_chat.main:app --host 0.0.0.0 --port 5001 --reload

Needs DATABASE_URL (PostgreSQL, schema in prisma/schema.prisma), REDIS_URL
and SERVICE_AUTH_SECRET; see .env.example.
"""

import os

from dotenv import load_dotenv

load_dotenv()

import uvicorn

from marketplace_chat.config.settings import get_config

if __name__ == "__main__":
    env = os.getenv("APP_ENV", "development")
    settings = get_config(env)
    port = int(os.getenv("PORT", 5001))
    host = os.getenv("HOST", "0.0.0.0")

    if not settings.SERVICE_AUTH_SECRET:
        raise SystemExit("SERVICE_AUTH_SECRET is not set; every request would be rejected")

    print(f"Starting marketplace chat API in {env} mode...")
    print(f"Server running on http://{host}:{port}, events on ws://{host}:{port}/chat/threads/<id>/events")
    print(f"API docs available at http://{host}:{port}/docs")

    uvicorn.run(
        "marketplace_chat.main:app",
        host=host,
        port=port,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
