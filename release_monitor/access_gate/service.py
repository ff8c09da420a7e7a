from __future__ import annotations

import hmac
import logging
from typing import Optional

from release_monitor.access_gate.errors import UnauthorizedError
from release_monitor.common.enums import AccessDecision

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AccessGate:
    def __init__(self, secret: Optional[str] = None) -> None:
        self._expected = f"{BEARER_PREFIX}{secret}" if secret else None

    @property
    def refresh_enabled(self) -> bool:
        return self._expected is not None

    def authorize(self, authorization: Optional[str]) -> AccessDecision:
        if not authorization:
            return AccessDecision.read
        if self._expected is not None and hmac.compare_digest(
            authorization.encode("utf-8"), self._expected.encode("utf-8")
        ):
            return AccessDecision.refresh
        logger.warning("Rejected refresh request with an invalid update token")
        raise UnauthorizedError("invalid update token")
