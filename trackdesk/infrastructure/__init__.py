"""Infrastructure: realtime store adapters and security.

Implements the application ports (IRealtimeStore) against Firebase and memory.
"""
