"""
APPLICATION SERVICES

- thread_access: identity resolution + authorization for thread-scoped use cases
- inbox_aggregator: lister/client inbox shaping
- realtime_sync: subscription lifecycle and event dedup
- thread_session: selected-thread state (view, optimistic sends, stale guard)
"""
