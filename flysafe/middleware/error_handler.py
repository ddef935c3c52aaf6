"""
Last-resort mapping of uncaught exceptions to JSON error responses.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from flysafe.domain.errors import EvaluationTimeoutError
from flysafe.infrastructure.external_api_client import ExternalAPIError


logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Turns exceptions that escaped the routers into JSON errors.

    Upstream failures and invalid input are reported distinctly so that a
    client never confuses "data unavailable" with "not safe to fly".
    """

    async def dispatch(self, request: Request, call_next: Callable):
        """Run the request, mapping upstream, timeout, validation and unexpected errors."""
        try:
            response = await call_next(request)
            return response

        except ExternalAPIError as e:
            logger.error(
                f"External API error: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": e.status_code,
                }
            )
            return JSONResponse(
                status_code=e.status_code,
                content={
                    "error": "Data unavailable",
                    "detail": e.message,
                }
            )

        except EvaluationTimeoutError as e:
            logger.error(
                f"Evaluation timeout: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content={
                    "error": "Evaluation timed out",
                    "detail": str(e),
                }
            )

        except ValueError as e:
            # InvalidInputError and pydantic validation errors
            logger.warning(
                f"Validation error: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={
                    "error": "Invalid request",
                    "detail": str(e),
                }
            )

        except Exception as e:
            logger.exception(
                f"Unhandled exception: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred",
                }
            )
