"""Docker engine client.

Thin async facade over the Docker SDK. SDK calls block, so each one runs in
a worker thread via ``asyncio.to_thread``; the event loop keeps scheduling
other operations while the engine answers. Engine errors are not wrapped:
callers see the ``docker.errors`` exception raised by the SDK.
"""

import asyncio
import logging
import threading
from typing import Any, Optional

import docker
import docker.errors

logger = logging.getLogger("dockgate.docker")


class EngineClient:
    """Async operations against one Docker engine."""

    def __init__(self, base_url: str, timeout: int = 60) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._client: Optional[docker.DockerClient] = None
        self._client_lock = threading.Lock()

    @property
    def client(self) -> docker.DockerClient:
        """
        Docker client, created on first use.

        Creating the client negotiates the API version with the engine, so
        this is only touched from worker threads.
        """
        with self._client_lock:
            if self._client is None:
                self._client = docker.DockerClient(base_url=self.base_url, timeout=self.timeout)
                logger.info(f"Docker client initialized ({self.base_url})")
            return self._client

    def _invoke(self, fn_name: str, args: tuple, kwargs: dict) -> Any:
        return getattr(self.client.api, fn_name)(*args, **kwargs)

    async def _call(self, fn_name: str, *args: Any, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._invoke, fn_name, args, kwargs)

    def close(self) -> None:
        """Release the engine connection pool."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    async def list_containers(self, all: bool = True) -> list[dict[str, Any]]:
        logger.debug(f"Listing containers (all: {all})")
        return await self._call("containers", all=all)

    async def create_container(self, image: str, name: Optional[str] = None) -> str:
        """Create a container and return its id."""
        logger.info(f"Creating container: {image} with name: {name}")
        created = await self._call("create_container", image=image, name=name)
        return created["Id"]

    async def get_container(self, container_id: str) -> dict[str, Any]:
        logger.debug(f"Getting container: {container_id}")
        return await self._call("inspect_container", container_id)

    async def start_container(self, container_id: str) -> None:
        logger.info(f"Starting container: {container_id}")
        await self._call("start", container_id)

    async def stop_container(self, container_id: str) -> None:
        logger.info(f"Stopping container: {container_id}")
        await self._call("stop", container_id)

    async def restart_container(self, container_id: str) -> None:
        logger.info(f"Restarting container: {container_id}")
        await self._call("restart", container_id)

    async def remove_container(self, container_id: str) -> None:
        logger.info(f"Removing container: {container_id}")
        await self._call("remove_container", container_id, force=True)

    async def get_container_logs(self, container_id: str, tail: int = 100) -> str:
        logger.debug(f"Getting logs for container: {container_id} (tail: {tail})")
        raw = await self._call(
            "logs",
            container_id,
            stdout=True,
            stderr=True,
            tail=tail,
            timestamps=True,
        )
        if isinstance(raw, bytes):
            return raw.decode("utf-8", errors="replace")
        return raw

    async def get_container_stats(self, container_id: str) -> dict[str, Any]:
        logger.debug(f"Getting stats for container: {container_id}")
        return await self._call("stats", container_id, stream=False)

    # -------------------------------------------------------------------------
    # Networks
    # -------------------------------------------------------------------------

    async def list_networks(self) -> list[dict[str, Any]]:
        logger.debug("Listing networks")
        return await self._call("networks")

    async def create_network(
        self,
        name: str,
        driver: str = "bridge",
        options: Optional[dict[str, str]] = None,
        ipam: Optional[dict[str, Any]] = None,
    ) -> str:
        """Create a network and return its id."""
        logger.info(f"Creating network: {name}")
        created = await self._call(
            "create_network",
            name,
            driver=driver,
            options=options or {},
            ipam=ipam,
        )
        return created["Id"]

    async def get_network(self, network_id: str) -> dict[str, Any]:
        logger.debug(f"Getting network: {network_id}")
        return await self._call("inspect_network", network_id)

    async def remove_network(self, network_id: str) -> None:
        logger.info(f"Removing network: {network_id}")
        await self._call("remove_network", network_id)

    async def connect_container_to_network(
        self,
        network_id: str,
        container_id: str,
        endpoint_config: Optional[dict[str, Any]] = None,
    ) -> None:
        """Attach a container; endpoint_config uses engine keys (Aliases, IPAMConfig)."""
        logger.info(f"Connecting container {container_id} to network {network_id}")
        config = endpoint_config or {}
        ipam_config = config.get("IPAMConfig") or {}
        await self._call(
            "connect_container_to_network",
            container_id,
            network_id,
            aliases=config.get("Aliases") or None,
            ipv4_address=ipam_config.get("IPv4Address"),
            ipv6_address=ipam_config.get("IPv6Address"),
        )

    async def disconnect_container_from_network(self, network_id: str, container_id: str) -> None:
        logger.info(f"Disconnecting container {container_id} from network {network_id}")
        await self._call(
            "disconnect_container_from_network",
            container_id,
            network_id,
            force=True,
        )


def is_not_found(exc: BaseException) -> bool:
    """True when an engine error means the addressed object does not exist."""
    return isinstance(exc, docker.errors.NotFound)
