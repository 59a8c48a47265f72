"""Admin authentication via a shared API key header."""
import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException

from leadflow.core.config import settings

logger = logging.getLogger(__name__)


def require_admin(x_admin_key: Optional[str] = Header(None)) -> None:
    """Dependency for admin routes: X-Admin-Key must equal ADMIN_API_KEY."""
    expected = settings.ADMIN_API_KEY
    if not expected:
        logger.warning("⚠️ Admin request rejected: ADMIN_API_KEY is not configured")
        raise HTTPException(status_code=403, detail="Admin access is not configured")
    if not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=403, detail="Admin access required")
