from .fetcher import MediaFetcher
from .retry import linear, retry_with_backoff

__all__ = ["MediaFetcher", "linear", "retry_with_backoff"]
