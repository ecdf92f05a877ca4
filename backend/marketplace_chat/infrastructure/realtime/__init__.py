"""
Realtime transport adapters.

- envelope: JSON wire format {"event": ..., "data": ...}
- redis_realtime_service: Redis pub/sub RealtimeService + MessageEventPublisher
- realtime_message_repository: publishes message.inserted after each create
"""
