from __future__ import annotations

from typing import Optional

import httpx

from .resource import Resource


class HalClientError(Exception):
    """Base error for client failures."""


class HalTransportError(HalClientError):
    """
    The request could not be sent (network, timeout, TLS, body encoding).
    No response exists; ``resource`` is always empty.
    """

    def __init__(self, message: str, *, request: httpx.Request):
        super().__init__(message)
        self.request = request
        self.resource = Resource()

    @classmethod
    def create(
        cls,
        request: httpx.Request,
        cause: Optional[BaseException] = None,
        message: Optional[str] = None,
    ) -> "HalTransportError":
        if message is None:
            message = "Exception raised by the HTTP transport while sending the request."
            if cause is not None:
                message = f"HTTP transport error: {cause}."
        return cls(message, request=request)


class HalBadResponseError(HalClientError):
    """
    The server answered, but not with a usable HAL resource.
    Carries the request, the response and whatever resource could be salvaged
    from the body (possibly empty).
    """

    def __init__(
        self,
        message: str,
        *,
        request: httpx.Request,
        response: httpx.Response,
        resource: Optional[Resource] = None,
    ):
        super().__init__(message)
        self.request = request
        self.response = response
        self.resource = resource if resource is not None else Resource()
        self.status_code = response.status_code

    @classmethod
    def create(
        cls,
        request: httpx.Request,
        response: httpx.Response,
        resource: Optional[Resource] = None,
        message: Optional[str] = None,
    ) -> "HalBadResponseError":
        if not message:
            code = response.status_code
            if 400 <= code < 500:
                message = "Client error"
            elif 500 <= code < 600:
                message = "Server error"
            else:
                message = "Unsuccessful response"

        message = (
            f"{message}: {request.method} {request.url} -> "
            f"{response.status_code} ({response.reason_phrase})."
        )
        return cls(message, request=request, response=response, resource=resource)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600


__all__ = ["HalClientError", "HalTransportError", "HalBadResponseError"]
