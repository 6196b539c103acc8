from .redis_gateway import RedisClient

__all__ = ["RedisClient"]
