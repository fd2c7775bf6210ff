import json
import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode, urlsplit

import httpx
from pydantic import BaseModel

from .config import HalClientConfig
from .errors import HalBadResponseError, HalClientError, HalTransportError
from .factory import ResourceFactory
from .observability import log_event, log_exchange
from .resource import Resource

__version__ = "0.1.0"

USER_AGENT = f"hal-client/{__version__}"

VALID_CONTENT_TYPES = (
    "application/hal+json",
    "application/json",
    "application/vnd.error+json",
    "application/problem+json",
)

HTTP_VERSIONS = {
    "1.0": "HTTP/1.0",
    "1.1": "HTTP/1.1",
    "2": "HTTP/2",
    "2.0": "HTTP/2",
}

QueryParams = Union[str, Mapping[str, Any]]


def _query_pairs(query: Optional[QueryParams]) -> Dict[str, Any]:
    """Parses a query string or mapping into an ordered dict; repeated keys become lists."""
    if not query:
        return {}
    if isinstance(query, Mapping):
        return dict(query)

    result: Dict[str, Any] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key not in result:
            result[key] = value
        elif isinstance(result[key], list):
            result[key].append(value)
        else:
            result[key] = [result[key], value]
    return result


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return [_query_value(v) for v in value]
    return value


def _encode_body(body: Any) -> bytes:
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, BaseModel):
        return body.model_dump_json().encode("utf-8")
    return json.dumps(body, allow_nan=False).encode("utf-8")


class HalClient:
    """
    Synchronous client for HAL+JSON APIs.
    - Resolves request paths against the endpoint URI
    - Follows redirects and "201 Created" Location headers with a GET
    - Validates content types and decodes JSON bodies into Resource graphs
    - Raises HalTransportError / HalBadResponseError on failures
    """

    def __init__(
        self,
        endpoint: Union[str, httpx.URL],
        *,
        resource_factory: Optional[ResourceFactory] = None,
        http: Optional[httpx.Client] = None,
        timeout_seconds: float = 10.0,
        max_redirects: int = 10,
        verify_tls: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        if isinstance(endpoint, str):
            endpoint = endpoint.strip()
        if not endpoint:
            raise ValueError("endpoint must be provided.")

        self.endpoint = httpx.URL(endpoint)
        if not self.endpoint.is_absolute_url:
            raise ValueError(f"endpoint must be an absolute URL, got {endpoint!r}.")

        self.resource_factory = resource_factory or ResourceFactory()
        self.max_redirects = max_redirects
        self.log = logger or logging.getLogger("hal_client.client")

        self._owns_http = http is None
        self.http = http or httpx.Client(
            timeout=timeout_seconds,
            verify=verify_tls,
            follow_redirects=False,
        )

    @classmethod
    def from_config(cls, config: HalClientConfig, **kwargs) -> "HalClient":
        kwargs.setdefault("timeout_seconds", config.timeout_seconds)
        kwargs.setdefault("max_redirects", config.max_redirects)
        kwargs.setdefault("verify_tls", config.verify_tls)
        return cls(config.endpoint, **kwargs)

    @classmethod
    def from_env(cls, **kwargs) -> "HalClient":
        return cls.from_config(HalClientConfig.from_env(), **kwargs)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "HalClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get(self, path: str, **options: Any) -> Resource:
        """Executes a GET request and returns the resource."""
        return self.request("GET", path, **options)

    def post(self, path: str, **options: Any) -> Resource:
        return self.request("POST", path, **options)

    def put(self, path: str, **options: Any) -> Resource:
        return self.request("PUT", path, **options)

    def patch(self, path: str, **options: Any) -> Resource:
        return self.request("PATCH", path, **options)

    def delete(self, path: str, **options: Any) -> Resource:
        return self.request("DELETE", path, **options)

    def request(
        self,
        method: str,
        path: str,
        *,
        query: Optional[QueryParams] = None,
        headers: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        version: Optional[str] = None,
    ) -> Resource:
        """
        Executes a request and returns the resource.

        Options:
        - query: mapping or query string merged over the target's query
        - headers: extra headers, overriding the defaults
        - body: str/bytes sent verbatim, anything else JSON encoded
        - version: HTTP protocol version ("1.0", "1.1", "2")
        """
        return self._request(
            method.upper(),
            path,
            query=query,
            headers=headers,
            body=body,
            version=version,
            redirects=0,
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        query: Optional[QueryParams] = None,
        headers: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        version: Optional[str] = None,
        redirects: int,
    ) -> Resource:
        request = self._build_request(
            method, path, query=query, headers=headers, body=body, version=version
        )

        start = time.perf_counter()
        try:
            response = self.http.send(request, stream=True)
        except httpx.HTTPError as exc:
            log_exchange(request, start, status="exception", logger=self.log, error=exc)
            raise HalTransportError.create(request, exc) from exc

        log_exchange(request, start, status=response.status_code, logger=self.log)

        try:
            return self._handle_response(request, response, redirects)
        finally:
            response.close()

    def _handle_response(
        self, request: httpx.Request, response: httpx.Response, redirects: int
    ) -> Resource:
        status = response.status_code
        if status == 204:
            return self.resource_factory.create_resource({})

        if 300 <= status < 400:
            locations = response.headers.get_list("Location")
            if locations:
                return self._follow(request, response, locations[0], redirects)
            raise HalBadResponseError(
                "No location found in redirect.",
                request=request,
                response=response,
                resource=self.resource_factory.create_resource({}),
            )

        try:
            response.read()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise HalBadResponseError(
                f"Error getting response body: {exc}.",
                request=request,
                response=response,
                resource=self.resource_factory.create_resource({}),
            ) from exc

        valid_content_type = self._has_valid_content_type(response)
        data = self._decode_body(request, response, valid_content_type)

        if 200 <= status < 300:
            locations = response.headers.get_list("Location")
            if status == 201 and not data and locations:
                return self._follow(request, response, locations[0], redirects)

            if not valid_content_type:
                types = response.headers.get_list("Content-Type") or ["none"]
                raise HalBadResponseError(
                    f"Invalid content type: {', '.join(types)}.",
                    request=request,
                    response=response,
                    resource=self.resource_factory.create_resource({}),
                )

            return self.resource_factory.create_resource(data)

        if valid_content_type:
            resource = self.resource_factory.create_resource(data)
        else:
            resource = self.resource_factory.create_resource({})

        raise HalBadResponseError.create(request, response, resource)

    def _follow(
        self,
        request: httpx.Request,
        response: httpx.Response,
        location: str,
        redirects: int,
    ) -> Resource:
        response.close()
        if redirects >= self.max_redirects:
            raise HalBadResponseError(
                f"Too many redirects (limit {self.max_redirects}).",
                request=request,
                response=response,
                resource=self.resource_factory.create_resource({}),
            )

        log_event(
            "hal_redirect",
            self.log,
            method=request.method,
            url=str(request.url),
            status=response.status_code,
            location=location,
            redirects=redirects + 1,
        )
        return self._request("GET", location, redirects=redirects + 1)

    def _decode_body(
        self, request: httpx.Request, response: httpx.Response, valid_content_type: bool
    ) -> Dict[str, Any]:
        content = response.content
        if not content.strip():
            return {}

        # malformed bodies are tolerated unless the server claims JSON
        try:
            data = json.loads(content)
        except ValueError as exc:
            if valid_content_type:
                raise HalBadResponseError(
                    f"JSON parse error: {exc}.",
                    request=request,
                    response=response,
                    resource=self.resource_factory.create_resource({}),
                ) from exc
            return {}

        if not isinstance(data, dict):
            if valid_content_type:
                raise HalBadResponseError(
                    "JSON parse error: expected a JSON object, "
                    f"got {type(data).__name__}.",
                    request=request,
                    response=response,
                    resource=self.resource_factory.create_resource({}),
                )
            return {}
        return data

    def _build_request(
        self,
        method: str,
        path: str,
        *,
        query: Optional[QueryParams],
        headers: Optional[Mapping[str, Any]],
        body: Any,
        version: Optional[str],
    ) -> httpx.Request:
        url = self._target_url(path, query)

        request_headers = httpx.Headers(
            {"User-Agent": USER_AGENT, "Accept": ", ".join(VALID_CONTENT_TYPES)}
        )
        for name, value in (headers or {}).items():
            if isinstance(value, (list, tuple)):
                value = ", ".join(str(v) for v in value)
            request_headers[name] = str(value)

        extensions: Dict[str, Any] = {}
        if version is not None:
            if str(version) not in HTTP_VERSIONS:
                raise ValueError(f"Unsupported HTTP version: {version!r}.")
            extensions["http_version"] = HTTP_VERSIONS[str(version)].encode("ascii")

        if body is None:
            return self.http.build_request(
                method, url, headers=request_headers, extensions=extensions
            )

        if "Content-Type" not in request_headers:
            request_headers["Content-Type"] = "application/json"

        try:
            content = _encode_body(body)
        except (TypeError, ValueError) as exc:
            # nothing was sent; report against the request without a body
            request = self.http.build_request(
                method, url, headers=request_headers, extensions=extensions
            )
            raise HalTransportError.create(
                request, exc, message=f"Unable to encode request body as JSON: {exc}."
            ) from exc

        return self.http.build_request(
            method, url, headers=request_headers, content=content, extensions=extensions
        )

    def _target_url(self, path: str, query: Optional[QueryParams]) -> httpx.URL:
        """
        Resolves path against the endpoint.
        Example: endpoint 'http://host/api', path '/api/users' or 'users'
        -> 'http://host/api/users'
        """
        parts = urlsplit(path)
        if parts.netloc:
            # absolute or scheme-relative (//host/x) targets keep their own host
            url = self.endpoint.join(path)
            sources: List[Optional[QueryParams]] = [url.query.decode("ascii"), query]
        else:
            base = self.endpoint.path.rstrip("/")
            target = parts.path
            if base and (target == base or target.startswith(base + "/")):
                target = target[len(base):]
            url = self.endpoint.copy_with(path=f"{base}/{target.lstrip('/')}")
            sources = [self.endpoint.query.decode("ascii"), parts.query, query]

        if not any(sources[1:]):
            return url

        merged: Dict[str, Any] = {}
        for source in sources:
            merged.update(_query_pairs(source))
        encoded = urlencode(
            {k: _query_value(v) for k, v in merged.items() if v is not None},
            doseq=True,
        )
        return url.copy_with(query=encoded.encode("ascii") if encoded else None)

    @staticmethod
    def _has_valid_content_type(response: httpx.Response) -> bool:
        for value in response.headers.get_list("Content-Type"):
            if value.split(";", 1)[0].strip() in VALID_CONTENT_TYPES:
                return True
        return False


__all__ = [
    "HalClient",
    "HalClientError",
    "HalTransportError",
    "HalBadResponseError",
    "USER_AGENT",
    "VALID_CONTENT_TYPES",
]
