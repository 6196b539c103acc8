from contextlib import contextmanager
import typing as t
import httpx

if t.TYPE_CHECKING:
    from core.logging import AbstractLogger


@contextmanager
def log_request(prefix: str, logger: "AbstractLogger"):
    from core.services.exceptions import ExternalGatewayError

    try:
        logger.info(f"{prefix}: Sending request")
        yield
    except httpx.HTTPError as e:
        if isinstance(e, httpx.RequestError):
            logger.exception("HTTP request failed", request=e.request, error=e)
        else:
            logger.error("HTTP error", error=e)
        raise ExternalGatewayError()


def log_response(resp: httpx.Response, logger: "AbstractLogger"):
    logger.info(
        "Response succesfully received",
        status=resp.status_code,
        url=resp.request.url,
    )
