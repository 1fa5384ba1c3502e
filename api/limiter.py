"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in api/main.py (to mount as middleware) and in the route modules
(to apply per-route limits with @limiter.limit()).

Using a single shared instance ensures all routes share the same in-memory
counter store. If this were instantiated in each module separately, each
module would get its own isolated counter and rate limits would never trigger.

Decorator order: @router.<verb>(...) outermost, @limiter.limit(...) directly
above the def. The per-route limit lives in the wrapper, so the router has to
register the wrapper.

Process-wide state: the route decorators bind to this object at import time,
so there is exactly one limiter per process. create_app() sets
`limiter.enabled` from Settings.rate_limit_enabled; the most recently built
app decides for every app in the process. Tests that switch limiting on must
switch it back off (see tests/test_rate_limit.py).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
