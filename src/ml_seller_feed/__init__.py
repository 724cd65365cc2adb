from .cache import ResponseCache
from .fetcher import ProductFetcher, RetryPolicy
from .models import FetchResult, Product, Session

__all__ = ["FetchResult", "Product", "ProductFetcher", "ResponseCache", "RetryPolicy", "Session"]
