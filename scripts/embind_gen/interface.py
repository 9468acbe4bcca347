"""
TypeScript interface generation module

Generates the raw .ts interface describing the 1:1 embind surface: enum
and flag declarations plus one method signature per bound C++ method.
"""

from typing import TYPE_CHECKING

from .signature import method_key

if TYPE_CHECKING:
    from .ir import EnumInfo, MethodInfo, ParamInfo, TypeMetadata
    from .types import TypeConverter

GENERATED_BANNER = [
    '// Generated by scripts/gen_bindings.py.',
    '// Do not edit manually.',
]


def param_ts_type(type_conv: 'TypeConverter', metadata: 'TypeMetadata',
                  method: 'MethodInfo', index: int, param: 'ParamInfo') -> str:
    """Override first, then the generic classification"""
    overrides = metadata.param_type_overrides.get(method_key(method), {})
    if index in overrides:
        return overrides[index]
    return type_conv.ts_type(param.type)


def return_ts_type(type_conv: 'TypeConverter', metadata: 'TypeMetadata', method: 'MethodInfo') -> str:
    override = metadata.return_type_overrides.get(method_key(method))
    if override:
        return override
    return type_conv.ts_type(method.return_type, is_return=True)


class InterfaceGenerator:
    """Generates the raw TypeScript interface file"""

    def __init__(self, type_conv: 'TypeConverter', metadata: 'TypeMetadata', interface_name: str):
        self.type_conv = type_conv
        self.metadata = metadata
        self.interface_name = interface_name

    def generate(self, methods: list['MethodInfo']) -> str:
        """Generate complete interface file"""
        lines = list(GENERATED_BANNER)
        lines.append('')
        lines.append('export type OpaqueHandle = number;')
        lines.append('')

        for enum in self.metadata.enum_defs + self.metadata.flag_defs:
            lines.extend(self._gen_enum(enum))
            lines.append('')

        lines.append(f'export interface {self.interface_name} {{')
        for method in methods:
            lines.append(self._gen_method(method))
        lines.append('}')
        lines.append('')
        return '\n'.join(lines)

    def _gen_enum(self, enum: 'EnumInfo') -> list[str]:
        lines = [f'export enum {enum.ts_name} {{']
        for item in enum.items:
            lines.append(f'  {item.name} = {item.value},')
        lines.append('}')
        return lines

    def _gen_method(self, method: 'MethodInfo') -> str:
        params = ', '.join(
            f'arg{i}: {param_ts_type(self.type_conv, self.metadata, method, i, p)}'
            for i, p in enumerate(method.params)
        )
        ret = return_ts_type(self.type_conv, self.metadata, method)
        return f'  {method.name}({params}): {ret};'
