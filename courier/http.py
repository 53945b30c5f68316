import asyncio
import json as _json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import aiohttp
from aiohttp import FormData

from .errors import Forbidden, HTTPException, InvalidState, NotFound, TransportError
from .payload import JSONBody, MultipartBody
from .routes import CompiledRoute


LOGGER = logging.getLogger("courier")

Body = Union[JSONBody, MultipartBody, None]


@dataclass
class FailureInfo:
    status: int
    reason: Optional[str] = None
    data: Any = None
    error: Optional[Exception] = None

    def to_exception(self) -> Exception:
        if self.error is not None:
            return self.error
        if self.status == 403:
            return Forbidden(self.status, self.reason, self.data)
        if self.status == 404:
            return NotFound(self.status, self.reason, self.data)
        return HTTPException(self.status, self.reason, self.data)


@dataclass
class Response:
    status: int
    reason: Optional[str] = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def as_object(self) -> Dict[str, Any]:
        if not isinstance(self.data, dict):
            raise InvalidState(f"Expected a JSON object, got {type(self.data).__name__}")
        return self.data

    def as_array(self) -> list:
        if not isinstance(self.data, list):
            raise InvalidState(f"Expected a JSON array, got {type(self.data).__name__}")
        return self.data

    def failure(self) -> FailureInfo:
        return FailureInfo(self.status, self.reason, self.data)


class RESTClient:
    def __init__(
        self,
        token: Optional[str],
        base_url: str = "https://discord.com/api",
        api_version: str = "6",
        token_prefix: str = "Bot ",
        user_agent: str = "courier (https://github.com/courier-py/courier)",
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._api_version = str(api_version).lstrip("v")
        self._token_prefix = token_prefix
        self._user_agent = user_agent
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    def set_token(self, token: str) -> None:
        self._token = token

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("RESTClient has not been started")
        return self._session

    def _headers(
        self,
        *,
        content_type: Optional[str] = "application/json",
        reason: Optional[str] = None,
        auth: bool = True,
    ) -> Dict[str, str]:
        base = {
            "User-Agent": self._user_agent,
        }
        if content_type:
            base["Content-Type"] = content_type
        if auth and self._token:
            base["Authorization"] = f"{self._token_prefix}{self._token}"
        if reason:
            base["X-Audit-Log-Reason"] = reason
        return base

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        path = path if path.startswith("/") else f"/{path}"
        if path.startswith("/v") and len(path) > 2 and path[2].isdigit():
            return f"{self._base_url}{path}"
        return f"{self._base_url}/v{self._api_version}{path}"

    @staticmethod
    def _form(body: MultipartBody) -> FormData:
        form = FormData()
        for part in body.parts:
            value = part.value
            if isinstance(value, (dict, list)):
                value = _json.dumps(value)
            form.add_field(
                part.name,
                value,
                filename=part.filename,
                content_type=part.content_type,
            )
        return form

    async def submit(
        self,
        route: CompiledRoute,
        body: Body = None,
        *,
        reason: Optional[str] = None,
    ) -> Response:
        """Perform one HTTP exchange for ``route``.

        Error statuses come back as a :class:`Response`; only a failure to get
        any response at all raises, as :class:`TransportError`.
        """
        url = self._url(route.path)
        content_type = None
        json_param = None
        payload = None

        if isinstance(body, JSONBody):
            content_type = "application/json"
            json_param = body.data
        elif isinstance(body, MultipartBody):
            payload = self._form(body)

        LOGGER.debug("Submitting %s", route)
        try:
            async with self.session.request(
                method=route.method,
                url=url,
                headers=self._headers(content_type=content_type, reason=reason),
                json=json_param,
                data=payload,
            ) as resp:
                if resp.status == 204:
                    return Response(resp.status, resp.reason, None)
                try:
                    data = await resp.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError):
                    data = await resp.text()
                return Response(resp.status, resp.reason, data)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"{route} failed: {exc}") from exc

    async def download(self, url: str) -> bytes:
        try:
            async with self.session.get(url, headers={"User-Agent": self._user_agent}) as resp:
                if resp.status >= 400:
                    if resp.status == 403:
                        raise Forbidden(resp.status, resp.reason)
                    if resp.status == 404:
                        raise NotFound(resp.status, resp.reason)
                    raise HTTPException(resp.status, resp.reason)
                return await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc
