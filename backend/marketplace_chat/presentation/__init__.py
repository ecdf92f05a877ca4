"""
Presentation layer - FastAPI routers, WebSocket endpoint and HTTP error mapping.
"""
