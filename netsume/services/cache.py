import json
import redis
from typing import Optional

from netsume.services.views import Loading, ViewState, from_dict, to_dict

VIEW_TTL_SECONDS = 60 * 60 * 24
PROGRESS_TTL_SECONDS = 60 * 60


def create_redis_client(url: str):
    return redis.Redis.from_url(url, decode_responses=True)


class SessionCache:
    """Per-user session state kept in Redis: current view, revoked tokens, upload progress."""

    def __init__(self, client):
        self.client = client

    def revoke_token(self, jti: str, ttl_seconds: int) -> None:
        self.client.setex(f"revoked:{jti}", max(ttl_seconds, 1), "1")

    def is_token_revoked(self, jti: str) -> bool:
        return bool(self.client.exists(f"revoked:{jti}"))

    def get_view(self, uid: str) -> ViewState:
        data = self.client.get(f"view:{uid}")
        if not data:
            return Loading()
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return from_dict(json.loads(data))

    def set_view(self, uid: str, view: ViewState) -> None:
        self.client.setex(f"view:{uid}", VIEW_TTL_SECONDS, json.dumps(to_dict(view)))

    def set_upload_progress(self, uid: str, percent: int) -> None:
        self.client.setex(f"upload:{uid}", PROGRESS_TTL_SECONDS, str(percent))

    def get_upload_progress(self, uid: str) -> Optional[int]:
        data = self.client.get(f"upload:{uid}")
        return int(data) if data is not None else None
