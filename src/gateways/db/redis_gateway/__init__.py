from .main import RedisClient as RedisClient
