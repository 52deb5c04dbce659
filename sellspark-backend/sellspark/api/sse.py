from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse
import redis.asyncio as aioredis

from sellspark.utils.redis_pub import channel_for

router = APIRouter()


async def event_stream(redis_url: str, session_id: str):
    client = aioredis.Redis.from_url(redis_url)
    pubsub = client.pubsub()
    await pubsub.subscribe(channel_for(session_id))

    try:
        async for message in pubsub.listen():
            if message["type"] == "message":
                yield {"data": message["data"].decode()}
    finally:
        await pubsub.unsubscribe(channel_for(session_id))
        await pubsub.aclose()
        await client.aclose()


@router.get("/consultations/{session_id}/events")
async def subscribe_to_events(session_id: str, request: Request):
    redis_url = request.app.state.settings.REDIS_PUBSUB_URL
    return EventSourceResponse(event_stream(redis_url, session_id))
