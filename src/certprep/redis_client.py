"""Redis connection pool."""

import redis.asyncio as redis
from starlette.requests import Request


def create_redis(url: str) -> redis.Redis:
    """Create the Redis client backing the connection pool."""
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )


async def close_redis(client: redis.Redis | None) -> None:
    """Close the Redis connection pool."""
    if client is not None:
        await client.aclose()


def get_redis(request: Request) -> redis.Redis:
    """Get the Redis client attached to the running app (FastAPI dependency)."""
    client: redis.Redis | None = getattr(request.app.state, "redis", None)
    if client is None:
        msg = "Redis not initialized."
        raise RuntimeError(msg)
    return client
