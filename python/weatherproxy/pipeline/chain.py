"""Ordered, composable interception of a single outbound HTTP call.

A chain is a list of stages plus a terminal send. Invoking the chain with a
request runs the stages in registration order on the way out, calls the
terminal send once, and unwinds the stages in reverse order on the way
back:

    chain = build_chain([LoggingStage(), ApiKeyStage(source)], send)
    response = await chain(request)

    LoggingStage ─▶ ApiKeyStage ─▶ send
    LoggingStage ◀─ ApiKeyStage ◀─ response

Earlier stages wrap later ones, so a mutation made by stage A is visible to
stage B and to the terminal send. A stage may:
- inspect or mutate the outbound request
- short-circuit by raising (or returning a response) without calling next
- observe or replace the response before it returns to the caller

PipelineTransport plugs a chain into httpx, with the wrapped transport's
handle_async_request as the terminal send.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence

import httpx

Send = Callable[[httpx.Request], Awaitable[httpx.Response]]
StageFunc = Callable[[httpx.Request, Send], Awaitable[httpx.Response]]


class PipelineError(RuntimeError):
    """The chain was driven in a way that breaks its contract."""


class Stage(ABC):
    """One link in an outbound call chain."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def handle(self, request: httpx.Request, call_next: Send) -> httpx.Response:
        """Process the request and return a response.

        Args:
            request: The outbound request. May be mutated in place.
            call_next: Sends the request through the rest of the chain.

        Returns:
            The response to hand back to the previous stage.
        """


class FunctionStage(Stage):
    """Adapt a plain ``async def fn(request, call_next)`` into a stage."""

    def __init__(self, func: StageFunc, name: str | None = None):
        self._func = func
        self._name = name or getattr(func, "__name__", type(self).__name__)

    @property
    def name(self) -> str:
        return self._name

    async def handle(self, request: httpx.Request, call_next: Send) -> httpx.Response:
        return await self._func(request, call_next)


class StageChain:
    """Callable composition of stages around a terminal send.

    The stage list is fixed at construction; the chain holds no per-call
    state, so one instance is safe to share across concurrent requests.
    """

    def __init__(self, stages: Sequence[Stage], send: Send):
        self._stages = tuple(stages)
        self._send = send

    @property
    def stages(self) -> tuple[Stage, ...]:
        return self._stages

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        sent = False

        async def terminal(req: httpx.Request) -> httpx.Response:
            nonlocal sent
            if sent:
                raise PipelineError("terminal send invoked more than once for one request")
            sent = True
            return await self._send(req)

        call_next: Send = terminal
        for stage in reversed(self._stages):
            call_next = _bind(stage, call_next)
        return await call_next(request)


def _bind(stage: Stage, call_next: Send) -> Send:
    async def call(request: httpx.Request) -> httpx.Response:
        return await stage.handle(request, call_next)

    return call


def build_chain(stages: Sequence[Stage], send: Send) -> StageChain:
    """Compose stages around a terminal send.

    Args:
        stages: Stages in registration order (first wraps all others).
        send: The terminal operation that performs the actual call.

    Returns:
        A callable taking a request and returning the final response.
    """
    return StageChain(stages, send)


class PipelineTransport(httpx.AsyncBaseTransport):
    """httpx transport that runs every request through a stage chain.

    Args:
        stages: Stages in registration order.
        transport: The transport that performs the network call.
            Defaults to httpx.AsyncHTTPTransport().
    """

    def __init__(
        self,
        stages: Sequence[Stage],
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._chain = build_chain(stages, self._transport.handle_async_request)

    @property
    def stages(self) -> tuple[Stage, ...]:
        return self._chain.stages

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._chain(request)

    async def aclose(self) -> None:
        await self._transport.aclose()
