from collections.abc import Awaitable, Callable
from typing import Protocol

from deploy_on_save.models import ToolingCompileResult

CompileRequest = Callable[[str, dict[str, str]], Awaitable[ToolingCompileResult]]


class ToolingCompiler(Protocol):
    async def request_compile(self) -> CompileRequest: ...
