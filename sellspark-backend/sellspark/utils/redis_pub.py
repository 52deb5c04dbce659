import json
import logging

import redis

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

CHANNEL_PREFIX = "sellspark:consultation"


def channel_for(session_id: str) -> str:
    return f"{CHANNEL_PREFIX}:{session_id}"


class EventPublisher:
    """
    Publishes consultation events on a per-session Redis channel.
    Events are notifications only; a Redis outage never fails a step.
    """

    def __init__(self, redis_client):
        self.redis = redis_client

    @classmethod
    def from_url(cls, url: str) -> "EventPublisher":
        return cls(redis.Redis.from_url(url))

    def publish(self, session_id: str, event_type: str, payload: dict) -> None:
        message = {
            "type": event_type,
            "session_id": session_id,
            "payload": payload,
        }
        try:
            self.redis.publish(channel_for(session_id), json.dumps(message))
        except redis.RedisError:
            logger.warning("Could not publish %s for session=%s", event_type, session_id)
