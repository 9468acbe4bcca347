"""
Method signature keys

Join keys between the declaration AST and the implementation AST, which
are parsed independently and may spell the same type differently.
"""

from typing import TYPE_CHECKING

from .codegen import normalize_type

if TYPE_CHECKING:
    from .ir import MethodInfo


def create_method_key(method_name: str, param_types: list[str]) -> str:
    """Exact key: SetDebugLevel(int)"""
    signature = ','.join(normalize_type(t) for t in param_types)
    return f'{method_name}({signature})'


def create_method_arity_key(method_name: str, param_count: int) -> str:
    """Fallback key: SetDebugLevel#1"""
    return f'{method_name}#{param_count}'


def method_key(method: 'MethodInfo') -> str:
    return create_method_key(method.name, method.param_types)


def method_arity_key(method: 'MethodInfo') -> str:
    return create_method_arity_key(method.name, len(method.params))
