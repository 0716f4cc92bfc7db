# apps/core/middleware.py
"""
Middleware to expose the current request identity to code outside views
(logging, model save hooks).
"""
import threading

_thread_locals = threading.local()


def get_current_identity():
    """Get current identity from thread local storage"""
    return getattr(_thread_locals, 'identity', None)


def set_current_identity(identity):
    """Set current identity in thread local storage"""
    _thread_locals.identity = identity


class CurrentIdentityMiddleware:
    """
    Clears the thread-local identity around every request.
    The DRF authentication class fills it in once the bearer token is verified.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        set_current_identity(None)
        try:
            return self.get_response(request)
        finally:
            set_current_identity(None)
