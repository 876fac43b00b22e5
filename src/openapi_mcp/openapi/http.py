"""
Name: HTTP gateway.
Description: Executes the downstream HTTP calls behind tools. Resolves authorization once, interpolates path parameters, serializes JSON, form-urlencoded and multipart bodies, and normalizes every outcome into an HttpResult.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
from urllib.parse import quote, urlencode, urlparse

import httpx

from ..constants import (
    DEFAULT_ARRAY_REPEAT_HOSTS,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_HTTP_TIMEOUT,
    GENERIC_REQUEST_ERROR,
)
from ..errors import UnsupportedMethodError
from .auth.auth_helpers import build_auth_headers
from .models import (
    ContentType,
    HttpFailure,
    HttpMethod,
    HttpResult,
    HttpSuccess,
    MultipartPayload,
)

PLACEHOLDER_PATTERN = re.compile(r"{(.*?)}")


def interpolate_url(url: str, params: Optional[Any] = None) -> str:
    """Replace ``{name}`` placeholders with values from ``params``.

    Only string, number and boolean values are substituted; a placeholder
    whose key is missing or whose value is a list, dict or None stays as is.
    A list passed as ``params`` leaves the URL untouched.

    Args:
        url: URL or path template
        params: Mapping of parameter values

    Returns:
        The interpolated URL
    """
    if not params or isinstance(params, (list, tuple)):
        return url

    def replace(match: "re.Match[str]") -> str:
        key = match.group(1)
        value = params.get(key)
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (str, int, float)):
            return str(value)
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, url)


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _repeat_pairs(key: str, value: Any) -> Iterable[Tuple[str, str]]:
    if isinstance(value, dict):
        for sub_key, sub_value in value.items():
            yield from _repeat_pairs(f"{key}[{sub_key}]", sub_value)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _repeat_pairs(key, item)
    else:
        yield key, _form_value(value)


def encode_form(body: Dict[str, Any], array_repeat: bool = False) -> str:
    """Encode a body as application/x-www-form-urlencoded.

    By default list and dict values are sent as compact JSON strings. With
    ``array_repeat`` lists are sent as repeated keys (``a=1&a=2``) and dicts
    with bracketed keys (``a[b]=1``).
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in body.items():
        if array_repeat:
            pairs.extend(_repeat_pairs(key, value))
        elif isinstance(value, (dict, list, tuple)):
            pairs.append((key, json.dumps(value, separators=(",", ":"))))
        else:
            pairs.append((key, _form_value(value)))
    return urlencode(pairs, quote_via=quote)


class HttpGateway:
    """Makes requests to the downstream services."""

    def __init__(
        self,
        authorization: Optional[Any] = None,
        array_repeat_hosts: Iterable[str] = DEFAULT_ARRAY_REPEAT_HOSTS,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the gateway.

        Args:
            authorization: Authorization variant, resolved to headers here
            array_repeat_hosts: Hosts whose form bodies use repeated-key arrays
            timeout: Request timeout in seconds
            client: Optional pre-built httpx client
            logger: Logger for this gateway

        Raises:
            UnsupportedAuthorizationError: If the authorization is not supported
        """
        self.logger = logger or logging.getLogger(__name__).getChild("HttpGateway")
        self.default_headers: Dict[str, str] = {
            "Content-Type": DEFAULT_CONTENT_TYPE,
            **build_auth_headers(authorization),
        }
        self.array_repeat_hosts = tuple(array_repeat_hosts)
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self):
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def is_array_repeat(self, url: str) -> bool:
        """Whether form bodies sent to ``url`` use repeated-key arrays."""
        host = urlparse(url).hostname or url
        return any(repeat_host in host for repeat_host in self.array_repeat_hosts)

    def _build_body(
        self,
        method: HttpMethod,
        url: str,
        body: Optional[Union[Dict[str, Any], MultipartPayload]],
        headers: Dict[str, str],
    ) -> Dict[str, Any]:
        """Return the httpx keyword arguments carrying the request body."""
        if isinstance(body, MultipartPayload):
            # httpx sets the multipart boundary itself
            headers.pop("Content-Type", None)
            return {"data": dict(body.fields), "files": dict(body.files)}

        if method not in (HttpMethod.POST, HttpMethod.PUT) or body is None:
            return {}

        if headers.get("Content-Type") == ContentType.FORM_URLENCODED.value:
            return {"content": encode_form(body, self.is_array_repeat(url))}

        return {"content": json.dumps(body)}

    async def request(
        self,
        method: Union[HttpMethod, str],
        url: str,
        body: Optional[Union[Dict[str, Any], MultipartPayload]] = None,
        content_type: Union[ContentType, str] = ContentType.JSON,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResult:
        """Make a request to the downstream service.

        Args:
            method: HTTP method
            url: Fully interpolated URL
            body: Request body, or a multipart payload
            content_type: Encoding of the request body
            headers: Extra headers merged over the defaults

        Returns:
            HttpSuccess with the parsed body, or HttpFailure

        Raises:
            UnsupportedMethodError: If the method is not GET, POST, PUT or DELETE
        """
        try:
            method = HttpMethod(str(getattr(method, "value", method)).upper())
        except ValueError:
            raise UnsupportedMethodError(f"Unsupported method: {method}") from None

        request_headers = {
            **self.default_headers,
            "Content-Type": ContentType(content_type).value,
            **(headers or {}),
        }
        body_kwargs = self._build_body(method, url, body, request_headers)

        self.logger.debug(f"Making {method.value} request to {url}")
        try:
            response = await self._client.request(
                method.value, url, headers=request_headers, **body_kwargs
            )
        # InvalidURL is not an HTTPError
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.logger.exception(f"Failed to make request to {url}: {e!r}")
            return HttpFailure(status_code=500, error=GENERIC_REQUEST_ERROR)

        if not response.is_success:
            return HttpFailure(status_code=response.status_code, error=response.text)

        if not response.content:
            data: Any = {"status": "Success", "status_code": response.status_code}
        else:
            try:
                data = response.json()
            except ValueError:
                data = {"text": response.text}

        self.logger.debug("Request successful")
        return HttpSuccess(status_code=response.status_code, data=data)

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResult:
        return await self.request(HttpMethod.GET, url, headers=headers)

    async def post(
        self,
        url: str,
        body: Optional[Dict[str, Any]] = None,
        content_type: Union[ContentType, str] = ContentType.JSON,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResult:
        return await self.request(HttpMethod.POST, url, body, content_type, headers)

    async def put(
        self,
        url: str,
        body: Optional[Dict[str, Any]] = None,
        content_type: Union[ContentType, str] = ContentType.JSON,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResult:
        return await self.request(HttpMethod.PUT, url, body, content_type, headers)

    async def delete(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResult:
        return await self.request(HttpMethod.DELETE, url, headers=headers)

    async def upload(
        self,
        url: str,
        payload: MultipartPayload,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResult:
        """Make a multipart/form-data POST request."""
        return await self.request(
            HttpMethod.POST, url, payload, ContentType.MULTIPART, headers
        )
