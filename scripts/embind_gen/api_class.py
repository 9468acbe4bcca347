"""
API class generation module

Generates the ergonomic TypeScript wrapper class over the raw interface:
camelCase names, one entry per overload set, and default arguments that
the raw embind surface does not know about.

## Overload dispatch

C++ picks an overload by argument count; embind only dispatches on the
exact count. For every count that a single overload accepts only through
its defaults (a "fill case"), the wrapper appends the missing literal
defaults before forwarding:

    bool LoadModel(std::string model, bool addModelToPath = true);
    bool LoadModel(std::string, std::string, std::string, std::string, bool = true);

    loadModel(...args) -> 1 arg: push(true), 4 args: push(true)

Counts accepted by more than one overload are forwarded untouched.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, TYPE_CHECKING

from .codegen import as_camel_case
from .errors import NameCollisionError
from .interface import GENERATED_BANNER, param_ts_type, return_ts_type

if TYPE_CHECKING:
    from .ir import MethodInfo, TypeMetadata
    from .types import TypeConverter

logger = logging.getLogger(__name__)

BUILTIN_TS_TYPE_NAMES = {
    'string', 'number', 'boolean', 'void', 'unknown', 'any', 'never',
    'undefined', 'null', 'object', 'bigint', 'symbol', 'Array', 'ReadonlyArray',
}

# Identifiers that cannot name a parameter in strict-mode TypeScript
TS_RESERVED_WORDS = {
    'arguments', 'await', 'break', 'case', 'catch', 'class', 'const', 'continue',
    'debugger', 'default', 'delete', 'do', 'else', 'enum', 'eval', 'export',
    'extends', 'false', 'finally', 'for', 'function', 'if', 'implements',
    'import', 'in', 'instanceof', 'interface', 'let', 'new', 'null', 'package',
    'private', 'protected', 'public', 'return', 'static', 'super', 'switch',
    'this', 'throw', 'true', 'try', 'typeof', 'var', 'void', 'while', 'with',
    'yield',
}


@dataclass
class ApiParam:
    name: str
    type_name: str
    default_value: Optional[str] = None


@dataclass
class ApiOverload:
    method: 'MethodInfo'
    params: list[ApiParam]
    return_type: str

    @property
    def min_args(self) -> int:
        """Index of the first parameter of the trailing defaulted run"""
        count = len(self.params)
        while count > 0 and self.params[count - 1].default_value is not None:
            count -= 1
        return count

    @property
    def max_args(self) -> int:
        return len(self.params)

    def accepts(self, arg_count: int) -> bool:
        return self.min_args <= arg_count <= self.max_args


@dataclass
class FillCase:
    provided_arg_count: int
    default_values: list[str]


@dataclass
class MethodGroup:
    """All overloads of one C++ method under their camelCase name"""
    camel_name: str
    source_name: str
    overloads: list[ApiOverload] = field(default_factory=list)


def ts_param_names(names: list[str]) -> list[str]:
    """Rename reserved words (in -> in_) without clashing with the other names"""
    taken = set(names)
    result = []
    for name in names:
        if name in TS_RESERVED_WORDS:
            candidate = f'{name}_'
            suffix = 1
            while candidate in taken:
                candidate = f'{name}_{suffix}'
                suffix += 1
            taken.add(candidate)
            name = candidate
        result.append(name)
    return result


def build_method_groups(methods: list['MethodInfo'], type_conv: 'TypeConverter',
                        metadata: 'TypeMetadata', ignore: Iterable[str] = ()) -> list[MethodGroup]:
    """Group methods by camelCase name, in first-declaration order

    Raises NameCollisionError when two different C++ names share a camelCase name.
    """
    ignored = set(ignore)
    groups: list[MethodGroup] = []
    by_name: dict[str, MethodGroup] = {}

    for method in methods:
        if method.name in ignored:
            continue

        names = ts_param_names([p.name for p in method.params])
        params = [
            ApiParam(
                name=names[i],
                type_name=param_ts_type(type_conv, metadata, method, i, p),
                default_value=p.default_value,
            )
            for i, p in enumerate(method.params)
        ]
        overload = ApiOverload(method=method, params=params,
                               return_type=return_ts_type(type_conv, metadata, method))

        camel_name = as_camel_case(method.name)
        group = by_name.get(camel_name)
        if group is not None and group.source_name != method.name:
            raise NameCollisionError(
                f'"{group.source_name}" and "{method.name}" both map to "{camel_name}"',
                {'name': camel_name})

        if group is None:
            group = MethodGroup(camel_name=camel_name, source_name=method.name)
            by_name[camel_name] = group
            groups.append(group)
        group.overloads.append(overload)

    return groups


def build_fill_cases(overloads: list[ApiOverload]) -> list[FillCase]:
    """Argument counts that exactly one overload accepts via its defaults"""
    fill_cases = []
    for overload in overloads:
        for count in range(overload.min_args, overload.max_args):
            acceptors = sum(1 for o in overloads if o.accepts(count))
            if acceptors != 1:
                continue
            missing = overload.params[count:]
            if any(p.default_value is None for p in missing):
                continue
            fill_cases.append(FillCase(count, [p.default_value for p in missing]))
    fill_cases.sort(key=lambda c: c.provided_arg_count)
    return fill_cases


def collect_type_imports(groups: list[MethodGroup], interface_name: str) -> list[str]:
    """Enum/flag type names referenced by the generated methods"""
    imports = {interface_name}
    for group in groups:
        for overload in group.overloads:
            type_names = [p.type_name for p in overload.params] + [overload.return_type]
            for type_name in type_names:
                for identifier in re.findall(r'[A-Za-z_][A-Za-z0-9_]*', type_name):
                    if identifier not in BUILTIN_TS_TYPE_NAMES:
                        imports.add(identifier)
    return sorted(imports)


def _escape_jsdoc(text: str) -> str:
    return text.replace('*/', '*\\/')


class ApiClassGenerator:
    """Generates the ergonomic wrapper class file"""

    def __init__(self, type_conv: 'TypeConverter', metadata: 'TypeMetadata',
                 class_name: str, interface_name: str, interface_module: str,
                 ignore: Iterable[str] = ()):
        self.type_conv = type_conv
        self.metadata = metadata
        self.class_name = class_name
        self.interface_name = interface_name
        self.interface_module = interface_module
        self.ignore = set(ignore)

    def generate(self, methods: list['MethodInfo']) -> str:
        groups = build_method_groups(methods, self.type_conv, self.metadata, self.ignore)
        imports = collect_type_imports(groups, self.interface_name)

        lines = list(GENERATED_BANNER)
        lines += [
            '',
            f'import type {{ {", ".join(imports)} }} from "{self.interface_module}";',
            '',
            f'export class {self.class_name} {{',
            f'  readonly exec: {self.interface_name};',
            '',
            f'  constructor(exec: {self.interface_name}) {{',
            '    this.exec = exec;',
            '  }',
        ]

        for group in groups:
            lines.append('')
            if len(group.overloads) == 1:
                lines.extend(self._gen_single(group))
            else:
                lines.extend(self._gen_overloaded(group))

        lines.append('}')
        lines.append('')
        return '\n'.join(lines)

    def _gen_jsdoc(self, overload: ApiOverload) -> list[str]:
        doc = overload.method.doc
        param_docs = []
        for index, param in enumerate(overload.params):
            text = doc.param_text(index, overload.method.params[index].name)
            if text:
                param_docs.append((param.name, text))

        if not doc.description_lines and not param_docs and not doc.returns:
            return []

        lines = ['  /**']
        lines += [f'   * {_escape_jsdoc(line)}' for line in doc.description_lines]
        lines += [f'   * @param {name} {_escape_jsdoc(text)}' for name, text in param_docs]
        if doc.returns:
            lines.append(f'   * @returns {_escape_jsdoc(doc.returns)}')
        lines.append('   */')
        return lines

    def _gen_single(self, group: MethodGroup) -> list[str]:
        overload = group.overloads[0]
        params = ', '.join(
            f'{p.name}: {p.type_name} = {p.default_value}' if p.default_value is not None
            else f'{p.name}: {p.type_name}'
            for p in overload.params
        )
        call_args = ', '.join(p.name for p in overload.params)
        call = f'this.exec.{group.source_name}({call_args});'

        lines = self._gen_jsdoc(overload)
        lines.append(f'  {group.camel_name}({params}): {overload.return_type} {{')
        lines.append(f'    {call}' if overload.return_type == 'void' else f'    return {call}')
        lines.append('  }')
        return lines

    def _gen_overloaded(self, group: MethodGroup) -> list[str]:
        return_type = ' | '.join(dict.fromkeys(o.return_type for o in group.overloads))
        fill_cases = build_fill_cases(group.overloads)
        lines = []

        for overload in group.overloads:
            required = overload.min_args
            params = ', '.join(
                f'{p.name}?: {p.type_name}' if i >= required else f'{p.name}: {p.type_name}'
                for i, p in enumerate(overload.params)
            )
            lines.extend(self._gen_jsdoc(overload))
            lines.append(f'  {group.camel_name}({params}): {overload.return_type};')

        lines.append(f'  {group.camel_name}(...args: unknown[]): {return_type} {{')
        args_var = 'args'
        if fill_cases:
            args_var = 'normalizedArgs'
            lines.append('    const normalizedArgs = [...args] as unknown[];')
            lines.append('    switch (normalizedArgs.length) {')
            for case in fill_cases:
                lines.append(f'      case {case.provided_arg_count}:')
                lines.append(f'        normalizedArgs.push({", ".join(case.default_values)});')
                lines.append('        break;')
            lines.append('      default:')
            lines.append('        break;')
            lines.append('    }')

        call = (f'(this.exec.{group.source_name} as (...innerArgs: unknown[]) => {return_type})'
                f'(...{args_var});')
        lines.append(f'    {call}' if return_type == 'void' else f'    return {call}')
        lines.append('  }')
        return lines
