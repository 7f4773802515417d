from slowapi import Limiter
from slowapi.util import get_remote_address


# Keyed by client address; money-moving endpoints opt in with @limiter.limit(...).
limiter = Limiter(key_func=get_remote_address)
