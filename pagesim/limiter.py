from slowapi import Limiter
from slowapi.util import get_remote_address

# Shared by every router and registered on the app as ``app.state.limiter``.
limiter = Limiter(key_func=get_remote_address)
