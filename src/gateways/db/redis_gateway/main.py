from redis.asyncio import Redis


class RedisClient(Redis):
    @classmethod
    def from_url(
        cls,
        url: str,
        **kwargs,
    ) -> "RedisClient":
        return super().from_url(url, decode_responses=True, **kwargs)
