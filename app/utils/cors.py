from typing import Iterable

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class ScopedCORSMiddleware(CORSMiddleware):
    """
    Application-wide CORS handling with per-path opt-outs.

    Requests to an exempt path go straight to the app, preflights included,
    so the endpoint itself decides which CORS headers to send.
    """

    def __init__(self, app: ASGIApp, exempt_paths: Iterable[str] = (), **kwargs) -> None:
        super().__init__(app, **kwargs)
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].rstrip("/") in self.exempt_paths:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
