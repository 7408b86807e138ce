from shared.database.postgres import Base, get_async_session_factory, AsyncSessionFactory

__all__ = [
    "Base",
    "get_async_session_factory",
    "AsyncSessionFactory",
]
