"""BaseService — abstract foundation for tfwrap services.

Every service receives the frozen :class:`TfwrapSettings` at construction
time and converts pipeline exceptions into failed results at its boundary.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tfwrap.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from tfwrap.config.settings import TfwrapSettings
    from tfwrap.domain.errors import WrapperError

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class WrapperService(BaseService):
            def generate(self, source: str, ...) -> ServiceResult:
                try:
                    ...
                except WrapperError as exc:
                    return self._failure("generate_wrapper", exc)
    """

    def __init__(self, settings: TfwrapSettings) -> None:
        self._settings = settings

    def _failure(
        self,
        op: str,
        exc: WrapperError,
    ) -> ServiceResult:
        """Build a failed ServiceResult from a pipeline error."""
        logger.debug("%s failed with %s: %s", op, exc.code, exc.message)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=exc.code, message=exc.message, detail=exc.detail),
        )
