from collections.abc import Awaitable, Callable
from typing import Protocol

DoneCallback = Callable[[str], None]
LongJob = Callable[[DoneCallback], Awaitable[None]]


class JobRunnerPort(Protocol):
    def start_long_job(self, job: LongJob, key: str, exclusive: bool = False) -> None: ...
