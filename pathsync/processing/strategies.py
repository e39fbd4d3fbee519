"""
Path strategies: how a new line is obtained after an endpoint moves.

Exactly one strategy serves a controller. "remote" asks the path service,
"direct" connects the two markers with a straight line without any network
call.
"""

from typing import Optional, Protocol

from ..clients.path_service import PathServiceClient
from ..config import Config, ConfigurationError, STRATEGIES
from ..models.geometry import Path, PathRequest, PathResponse


class PathStrategy(Protocol):
    name: str

    async def compute(self, request: PathRequest) -> PathResponse: ...

    async def close(self) -> None: ...


class RemotePathStrategy:
    """Delegate to the remote path service."""

    name = "remote"

    def __init__(self, client: PathServiceClient):
        self.client = client

    async def compute(self, request: PathRequest) -> PathResponse:
        return await self.client.request_path(request)

    async def close(self) -> None:
        await self.client.close()


class DirectLineStrategy:
    """Straight line between source and target, computed locally."""

    name = "direct"

    async def compute(self, request: PathRequest) -> PathResponse:
        return PathResponse(path=Path.straight(request.source, request.target))

    async def close(self) -> None:
        pass


def build_strategy(config: Config, client: Optional[PathServiceClient] = None) -> PathStrategy:
    """
    Create the strategy named in the configuration.

    Args:
        config: Application configuration
        client: Pre-built client for the remote strategy (built from config if omitted)
    """
    if config.strategy == "direct":
        return DirectLineStrategy()
    if config.strategy == "remote":
        if client is None:
            client = PathServiceClient(
                base_url=config.path_service_url,
                timeout=config.path_service_timeout_s,
            )
        return RemotePathStrategy(client)
    raise ConfigurationError(
        f"Unknown path strategy: {config.strategy}. Available: {list(STRATEGIES)}"
    )
