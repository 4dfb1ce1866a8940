"""Operations that are part of the public contract but have no transform yet."""

from __future__ import annotations

from typing import NoReturn

from ..exceptions import OperationNotImplementedError
from .common.interfaces import BaseTool
from .common.pipeline import register_tool


class UnimplementedTool(BaseTool):
    error_class = OperationNotImplementedError

    def execute(self) -> NoReturn:
        raise OperationNotImplementedError("Coming soon", operation=self.name)


@register_tool("rotate")
class RotateTool(UnimplementedTool):
    pass


@register_tool("encrypt")
class EncryptTool(UnimplementedTool):
    pass


@register_tool("decrypt")
class DecryptTool(UnimplementedTool):
    pass


@register_tool("batch_process")
class BatchProcessTool(UnimplementedTool):
    pass
