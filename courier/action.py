from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generator, Generic, Optional, TypeVar

from .http import Body, FailureInfo, Response
from .payload import JSONBody
from .routes import CompiledRoute
from .utils import maybe_coroutine


LOGGER = logging.getLogger("courier")

T = TypeVar("T")

Decoder = Callable[[Response], T]
Callback = Callable[[Any], Any]


def decode_none(response: Response) -> None:
    return None


class DeferredAction(Generic[T]):
    """A request that has been validated and compiled but not yet sent.

    Nothing touches the network until :meth:`execute` is awaited. Every
    execution re-derives the body from the action's current state, submits it
    through ``client.http`` and fires exactly one of the success or failure
    callbacks.
    """

    def __init__(
        self,
        client: Any,
        route: CompiledRoute,
        data: Optional[Dict[str, Any]] = None,
        *,
        decoder: Optional[Decoder] = None,
        success: Optional[Callback] = None,
        failure: Optional[Callback] = None,
    ) -> None:
        self._client = client
        self.route = route
        self.data = data
        self._decoder = decoder or decode_none
        self._success = success
        self._failure = failure

    @property
    def client(self) -> Any:
        return self._client

    def is_edit(self) -> bool:
        return self.route.method == "PATCH"

    def finalize_body(self) -> Body:
        if self.data is None:
            return None
        return JSONBody(self.data)

    def _submit_kwargs(self) -> Dict[str, Any]:
        return {}

    async def execute(
        self,
        success: Optional[Callback] = None,
        failure: Optional[Callback] = None,
    ) -> Optional[T]:
        on_success = success or self._success
        on_failure = failure or self._failure

        body = self.finalize_body()
        response = await self._client.http.submit(self.route, body, **self._submit_kwargs())
        return await self.handle_response(response, on_success, on_failure)

    async def handle_response(
        self,
        response: Response,
        success: Optional[Callback],
        failure: Optional[Callback],
    ) -> Optional[T]:
        if not response.ok:
            return await self._fail(response.failure(), failure)

        try:
            value = self._decoder(response)
        except Exception as exc:
            info = FailureInfo(response.status, response.reason, response.data, error=exc)
            return await self._fail(info, failure)
        if success is not None:
            await maybe_coroutine(success, value)
        return value

    async def _fail(self, info: FailureInfo, failure: Optional[Callback]) -> None:
        if failure is None:
            if info.error is not None:
                LOGGER.error(
                    "%s returned an undecodable response: HTTP %s", self.route, info.status, exc_info=info.error
                )
            else:
                LOGGER.error("%s returned failure: HTTP %s %s", self.route, info.status, info.data)
        else:
            await maybe_coroutine(failure, info)
        return None

    async def complete(self) -> T:
        failures: list[FailureInfo] = []
        value = await self.execute(failure=failures.append)
        if failures:
            raise failures[0].to_exception()
        return value

    def __await__(self) -> Generator[Any, None, T]:
        return self.complete().__await__()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} route={self.route}>"


class AuditableAction(DeferredAction[T]):
    """A :class:`DeferredAction` whose request may carry an audit log reason."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._reason: Optional[str] = None

    def reason(self, reason: Optional[str]) -> "AuditableAction[T]":
        self._reason = reason
        return self

    def _submit_kwargs(self) -> Dict[str, Any]:
        if self._reason:
            return {"reason": self._reason}
        return {}
