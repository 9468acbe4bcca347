"""
Type metadata module

Combines class-declared enums, enum types inferred from casts in the
implementation file, and enum-looking parameter types into one
TypeMetadata with per-method parameter/return type overrides.

Each step takes the current definitions and returns new ones; nothing is
shared between steps except through return values.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from .clang_ast import AstNode, ClangAstDumper, find_ast_nodes
from .codegen import (
    normalize_type, normalize_enum_lookup_name, looks_like_enum_type_name,
    is_bool_type, is_numeric_type, is_pointer_type, is_reference_type,
)
from .enum import EnumResolver, add_enum_definition, parse_class_enums
from .ir import EnumInfo, MethodInfo, TypeMetadata
from .methods import param_nodes
from .signature import create_method_arity_key, create_method_key, method_arity_key, method_key
from .types import NUMBER

if TYPE_CHECKING:
    from .types import TypeConverter

logger = logging.getLogger(__name__)

CAST_KINDS = ('CStyleCastExpr', 'CXXStaticCastExpr')


@dataclass
class CastOverrides:
    """Enum types inferred from explicit casts of parameters"""
    # signature key -> {param index -> C++ cast type}
    by_method_key: dict[str, dict[int, str]] = field(default_factory=dict)
    # arity key -> {param index -> C++ cast type}
    by_arity_key: dict[str, dict[int, str]] = field(default_factory=dict)
    discovered_types: list[str] = field(default_factory=list)

    def for_method(self, method: MethodInfo) -> Optional[dict[int, str]]:
        """Signature match first, then (name, arity)"""
        found = self.by_method_key.get(method_key(method))
        if found is None:
            found = self.by_arity_key.get(method_arity_key(method))
        return found


def _is_enum_cast_type(cast_type: str) -> bool:
    if not cast_type:
        return False
    return not (is_bool_type(cast_type) or is_numeric_type(cast_type)
                or is_pointer_type(cast_type) or is_reference_type(cast_type))


def collect_cast_overrides(impl_ast: Optional[AstNode], method_names: set[str]) -> CastOverrides:
    """Scan method bodies for casts whose operand is one of the method's parameters"""
    overrides = CastOverrides()
    if not impl_ast:
        return overrides

    method_nodes = find_ast_nodes(impl_ast, lambda n: (n.get('kind') == 'CXXMethodDecl'
                                                       and n.get('name') in method_names))
    for method_node in method_nodes:
        params = param_nodes(method_node)
        if not params:
            continue

        param_types = [normalize_type(p.get('type', {}).get('qualType', 'void')) for p in params]
        signature_key = create_method_key(method_node['name'], param_types)
        arity_key = create_method_arity_key(method_node['name'], len(params))
        index_by_id = {p.get('id'): i for i, p in enumerate(params)}

        casts = find_ast_nodes(method_node, lambda n: (n.get('kind') in CAST_KINDS
                                                       and isinstance(n.get('type', {}).get('qualType'), str)))
        for cast in casts:
            cast_type = normalize_type(cast['type']['qualType'].removeprefix('enum '))
            if not _is_enum_cast_type(cast_type):
                continue

            refs = find_ast_nodes(cast, lambda n: (n.get('kind') == 'DeclRefExpr'
                                                   and n.get('referencedDecl', {}).get('kind') == 'ParmVarDecl'
                                                   and isinstance(n['referencedDecl'].get('id'), str)))
            for ref in refs:
                param_index = index_by_id.get(ref['referencedDecl']['id'])
                if param_index is None:
                    continue
                overrides.by_method_key.setdefault(signature_key, {}).setdefault(param_index, cast_type)
                overrides.by_arity_key.setdefault(arity_key, {}).setdefault(param_index, cast_type)
                if cast_type not in overrides.discovered_types:
                    overrides.discovered_types.append(cast_type)

    return overrides


def load_cast_overrides(dumper: ClangAstDumper, impl_path: Optional[str], class_name: str,
                        methods: list[MethodInfo]) -> CastOverrides:
    """Parse the implementation file (if any) and collect cast overrides"""
    if not impl_path or not os.path.exists(impl_path):
        logger.info('no implementation file, skipping cast inference')
        return CastOverrides()
    impl_ast = dumper.dump_file(impl_path, ast_filter=f'{class_name}::')
    if impl_ast is None:
        logger.warning('could not parse %s, skipping cast inference', impl_path)
    names = {m.name for m in methods if m.params}
    return collect_cast_overrides(impl_ast, names)


def collect_enum_candidates(methods: list[MethodInfo], cast_overrides: CastOverrides,
                            path_types) -> list[str]:
    """Cast-site types first, then enum-looking declared types"""
    candidates = dict.fromkeys(cast_overrides.discovered_types)
    for method in methods:
        for param in method.params:
            if looks_like_enum_type_name(param.type, path_types):
                candidates.setdefault(param.type)
        if looks_like_enum_type_name(method.return_type, path_types):
            candidates.setdefault(method.return_type)
    return list(candidates)


def resolve_enum_candidates(enum_defs: list[EnumInfo], candidates: list[str],
                            converter: 'TypeConverter',
                            resolver: Optional[EnumResolver]) -> tuple[list[EnumInfo], set[str]]:
    """Resolve candidates not covered by enum_defs; returns (definitions, unresolved)"""
    unresolved: set[str] = set()
    current = converter.with_enums(converter.build_enum_lookup(enum_defs))

    for candidate in candidates:
        if current.resolve_enum(candidate) is not None:
            continue
        definition = resolver.resolve(candidate) if resolver else None
        if definition is None:
            unresolved.add(normalize_enum_lookup_name(candidate))
            continue
        enum_defs = add_enum_definition(enum_defs, definition)
        current = converter.with_enums(converter.build_enum_lookup(enum_defs))

    return enum_defs, unresolved


def _set_param_override(overrides: dict[str, dict[int, str]], key: str, index: int, ts_name: str):
    overrides.setdefault(key, {}).setdefault(index, ts_name)


def build_type_overrides(methods: list[MethodInfo], enum_defs: list[EnumInfo], flag_defs: list[EnumInfo],
                         cast_overrides: CastOverrides,
                         converter: 'TypeConverter') -> tuple[dict, dict, set[str]]:
    """Per-method parameter and return type overrides

    converter must already know every enum in enum_defs.
    """
    param_overrides: dict[str, dict[int, str]] = {}
    return_overrides: dict[str, str] = {}
    unresolved: set[str] = set()

    for method in methods:
        key = method_key(method)

        for index, enum_type in (cast_overrides.for_method(method) or {}).items():
            info = converter.resolve_enum(enum_type)
            if info is None:
                unresolved.add(normalize_enum_lookup_name(enum_type))
                continue
            _set_param_override(param_overrides, key, index, info.ts_name)

        for enum_def in enum_defs:
            if (method.name == f'Set{enum_def.cpp_simple_name}' and len(method.params) == 1
                    and converter.classify(method.params[0].type) == NUMBER):
                _set_param_override(param_overrides, key, 0, enum_def.ts_name)

            if (method.name == f'Get{enum_def.cpp_simple_name}' and not method.params
                    and converter.classify(method.return_type, is_return=True) == NUMBER
                    and key not in return_overrides):
                return_overrides[key] = enum_def.ts_name

        for flag_def in flag_defs:
            if (method.name == flag_def.method_name and method.params
                    and converter.classify(method.params[0].type) == NUMBER):
                _set_param_override(param_overrides, key, 0, flag_def.ts_name)

    return param_overrides, return_overrides, unresolved


def build_type_metadata(methods: list[MethodInfo], class_node: AstNode, converter: 'TypeConverter',
                        cast_overrides: Optional[CastOverrides] = None,
                        resolver: Optional[EnumResolver] = None) -> TypeMetadata:
    """Resolve every enum/flag type the methods refer to"""
    cast_overrides = cast_overrides or CastOverrides()

    enum_defs, flag_defs = parse_class_enums(class_node, converter.namespace)
    candidates = collect_enum_candidates(methods, cast_overrides, converter.path_types)
    enum_defs, unresolved = resolve_enum_candidates(enum_defs, candidates, converter, resolver)

    enum_lookup = converter.build_enum_lookup(enum_defs)
    param_overrides, return_overrides, override_unresolved = build_type_overrides(
        methods, enum_defs, flag_defs, cast_overrides, converter.with_enums(enum_lookup))

    return TypeMetadata(
        enum_defs=enum_defs,
        flag_defs=flag_defs,
        enum_lookup=enum_lookup,
        param_type_overrides=param_overrides,
        return_type_overrides=return_overrides,
        unresolved_enum_types=unresolved | override_unresolved,
    )
