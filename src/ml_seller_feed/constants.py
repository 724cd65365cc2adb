"""Domain-wide constants and default values."""

DEFAULT_API_BASE_URL = "https://api.mercadolibre.com"
DEFAULT_SITE_ID = "MLB"
DEFAULT_CATEGORY = "MLB1648"
DEFAULT_SEARCH_LIMIT = 12
DEFAULT_SEARCH_SORT = "recent"
DEFAULT_SEARCH_STATUS = "active"
DEFAULT_CACHE_TTL_SECONDS = 1800
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_DESCRIPTION_LENGTH = 120
CACHE_KEY = "ml_products_v2"
SERVICE_NAME = "MJ TECH Backend API"
SERVICE_VERSION = "2.0.0"
