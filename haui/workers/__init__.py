"""Workers — background threads bridging Qt and the asyncio backend client."""

from haui.workers.client_worker import ClientWorker

__all__ = [
    "ClientWorker",
]
