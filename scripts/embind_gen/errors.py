"""
Error types

Fatal conditions that abort a generation run. Recoverable problems (a
compiler candidate failing, a probe header without a matching enum) are
logged and absorbed where they happen instead.
"""

from typing import Any, Optional


class BindgenError(Exception):
    """Base class for all generator errors"""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        msg = self.message
        if self.context:
            ctx_str = ' | '.join(f'{k}={v}' for k, v in self.context.items())
            msg = f'{msg} [{ctx_str}]'
        return msg


class MissingSourceError(BindgenError):
    """A required source file (the class header) does not exist"""
    pass


class ClassNotFoundError(BindgenError):
    """The class definition could not be located in the clang AST"""
    pass


class NameCollisionError(BindgenError):
    """
    Two different C++ method names map to the same camelCase API name.

    Merging them would silently change the public surface, so the run is
    aborted instead.
    """
    pass
