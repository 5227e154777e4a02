"""Translation of service failures into HTTP errors for the FHIR routes."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status

from fhir_interop.errors import NotFoundError

logger = logging.getLogger(__name__)


@contextmanager
def service_errors(action: str, resource_id: str | None = None) -> Iterator[None]:
    """Map exceptions raised inside the block to HTTP errors.

    NotFoundError becomes 404 with its message as detail. Any other
    exception is logged with its traceback and becomes 500 with detail
    "Failed to <action>". HTTPException passes through unchanged.
    """
    try:
        yield
    except HTTPException:
        raise
    except NotFoundError as e:
        logger.info("%s", e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    except Exception:
        if resource_id is None:
            logger.exception("Failed to %s", action)
        else:
            logger.exception("Failed to %s %s", action, resource_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}",
        ) from None
