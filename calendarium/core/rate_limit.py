from slowapi import Limiter
from slowapi.util import get_remote_address

from calendarium.core.config import settings

# ============================================================================
# Rate Limiter Setup
# ============================================================================
# Keyed on the client address. The default storage is in-process memory; point
# RATE_LIMIT_STORAGE_URI at a shared backend when running several workers.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
)
