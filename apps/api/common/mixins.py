# PATH: apps/api/common/mixins.py
import logging

from rest_framework.response import Response

from apps.core.exceptions import DomainError, StockShortage

logger = logging.getLogger(__name__)


class DomainErrorMixin:
    """
    DomainError raised anywhere inside a view -> {"detail": ...} with the
    error's status code. Everything else goes through DRF's normal handling.
    """

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            logger.info(
                "[domain_error] view=%s status=%s detail=%s",
                self.__class__.__name__,
                exc.status_code,
                exc,
            )
            body = {"detail": str(exc)}
            if isinstance(exc, StockShortage) and exc.shortages:
                body["shortages"] = exc.shortages
            return Response(body, status=exc.status_code)
        return super().handle_exception(exc)
