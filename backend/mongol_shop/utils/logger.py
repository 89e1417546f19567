import logging
import sys
from typing import Any, Dict, Optional

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger("mongol_shop")

_SENSITIVE_KEYS = ("password", "hashed_password", "access_token", "authorization")


def sanitize(data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a copy of ``data`` that is safe to log.

    Secrets longer than 8 characters keep their first and last 4 characters,
    shorter ones are fully masked.
    """
    if not data:
        return {}

    sanitized = dict(data)
    for key in _SENSITIVE_KEYS:
        if key in sanitized and sanitized[key] is not None:
            value = str(sanitized[key])
            if len(value) > 8:
                sanitized[key] = f"{value[:4]}...{value[-4:]}"
            else:
                sanitized[key] = "***"
    return sanitized
