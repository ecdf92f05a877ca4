"""
APPLICATION LAYER - Chat use cases

- ports: abstract boundaries to storage, auth and push transport
- dto / mappers: wire shapes and their translation to domain entities
- commands / queries: one handler per use case, ports injected via __init__
- services: thread access, inbox aggregation, realtime sync
"""
