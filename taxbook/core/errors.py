import logging
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse

from taxbook import metrics
from taxbook.core.exceptions import InvalidConfigurationError, TaxbookException

logger = logging.getLogger("taxbook.errors")


def register_error_handlers(app):
    @app.exception_handler(TaxbookException)
    async def taxbook_exception(request: Request, exc: TaxbookException):
        if isinstance(exc, InvalidConfigurationError):
            metrics.invalid_configuration(exc.code)
        logger.info("Rejected request path=%s code=%s: %s", request.url.path, exc.code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):  # noqa: BLE001
        correlation_id = uuid.uuid4().hex
        logger.exception("Unhandled error cid=%s path=%s method=%s", correlation_id, request.url.path, request.method)
        return JSONResponse(status_code=500, content={"detail": "Internal server error", "cid": correlation_id})

    return app
