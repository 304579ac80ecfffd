from typing import Protocol


class FileWatcherPort(Protocol):
    """Source of save events for a workspace's ``src`` tree."""

    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def wait(self) -> None:
        """Block until the watcher stops on its own."""
        ...
