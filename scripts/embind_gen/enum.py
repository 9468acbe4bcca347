"""
Enum discovery module

Finds enum definitions for the bound class: enums and mode-flag constant
groups declared in the class body, and enums declared elsewhere in the
library that are resolved by probing candidate headers with clang.
"""

import logging
import os
import re
from typing import Iterator, Optional

from .clang_ast import AstNode, ClangAstDumper, children, find_ast_nodes, find_descendant
from .codegen import normalize_enum_lookup_name, normalize_type, simple_type_name, strip_const_volatile
from .ir import EnumInfo, EnumItem
from .methods import collect_comment_text, find_full_comment

logger = logging.getLogger(__name__)

HEADER_EXTENSIONS = ('.h', '.hpp', '.hxx')

_re_int = re.compile(r'^-?\d+$')
_re_mode_flags = re.compile(r'Mode flags for `?([A-Za-z_][A-Za-z0-9_]*)', re.IGNORECASE)


def first_integer_value(node: AstNode) -> Optional[int]:
    """First integer constant found below node (pre-order)"""
    if not isinstance(node, dict) or node.get('kind', '').endswith('Comment'):
        return None

    if node.get('kind') == 'UnaryOperator' and node.get('opcode') == '-':
        value = None
        for child in children(node):
            value = first_integer_value(child)
            if value is not None:
                break
        return -value if value is not None else None

    value = node.get('value')
    if isinstance(value, str) and _re_int.match(value):
        return int(value)

    for child in children(node):
        found = first_integer_value(child)
        if found is not None:
            return found
    return None


def extract_enum_members(enum_decl: AstNode) -> list[EnumItem]:
    """Enumerators in order; implicit values continue from the previous one"""
    items = []
    next_value = 0
    for child in children(enum_decl):
        if child.get('kind') != 'EnumConstantDecl' or not child.get('name'):
            continue
        value = first_integer_value(child)
        if value is None:
            value = next_value
        items.append(EnumItem(name=child['name'], value=value))
        next_value = value + 1
    return items


def class_enum_ts_name(class_name: str, enum_name: str) -> str:
    """eMode -> FGFDMExecMode"""
    return class_name + re.sub(r'^e(?=[A-Z])', '', enum_name)


def flag_ts_name(method_name: str) -> str:
    return f'{method_name}Mode'


def add_enum_definition(definitions: list[EnumInfo], definition: EnumInfo) -> list[EnumInfo]:
    """Append unless a definition with the same TS or qualified name exists"""
    for existing in definitions:
        if (existing.ts_name == definition.ts_name
                or existing.cpp_qualified_name == definition.cpp_qualified_name):
            logger.debug('enum %s already defined, keeping first definition', definition.ts_name)
            return definitions
    return definitions + [definition]


# ==============================================================================
# Class body
# ==============================================================================

def _is_flag_constant(node: AstNode) -> bool:
    scalar = strip_const_volatile(node.get('type', {}).get('qualType', ''))
    return node.get('storageClass') == 'static' and scalar in ('int', 'unsigned int')


def parse_class_enums(class_node: AstNode, namespace: str) -> tuple[list[EnumInfo], list[EnumInfo]]:
    """Collect public enums and mode-flag groups declared in the class

    A static int constant documented "Mode flags for <Method>" starts a
    flag group; following undocumented constants join it until another
    kind of declaration (or a non-public region) interrupts the run.
    """
    class_name = class_node.get('name', '')
    enum_defs: list[EnumInfo] = []
    flags_by_method: dict[str, list[EnumItem]] = {}
    access = 'public' if class_node.get('tagUsed') == 'struct' else 'private'
    active_method = None

    for child in children(class_node):
        kind = child.get('kind')

        if kind == 'AccessSpecDecl':
            access = child.get('access', access)
            if access != 'public':
                active_method = None
            continue

        if access != 'public':
            active_method = None
            continue

        if kind == 'EnumDecl':
            active_method = None
            enum_name = child.get('name')
            if not enum_name:
                continue
            items = extract_enum_members(child)
            if not items:
                continue
            owner_name = f'{class_name}::{enum_name}'
            qualified = f'{namespace}::{owner_name}' if namespace else owner_name
            enum_defs = add_enum_definition(enum_defs, EnumInfo(
                ts_name=class_enum_ts_name(class_name, enum_name),
                items=items,
                cpp_simple_name=enum_name,
                cpp_qualified_name=qualified,
                cpp_type_names={enum_name, owner_name, qualified,
                                f'enum {enum_name}', f'enum {owner_name}'},
            ))
            continue

        if kind != 'VarDecl' or not _is_flag_constant(child):
            active_method = None
            continue

        match = _re_mode_flags.search(collect_comment_text(find_full_comment(child)))
        if match:
            active_method = match.group(1)
        if not active_method:
            continue

        value = first_integer_value(child)
        if value is None or not child.get('name'):
            continue
        flags_by_method.setdefault(active_method, []).append(EnumItem(name=child['name'], value=value))

    flag_defs = [
        EnumInfo(ts_name=flag_ts_name(method_name), items=items, kind='flags', method_name=method_name)
        for method_name, items in flags_by_method.items()
        if items
    ]
    return enum_defs, flag_defs


# ==============================================================================
# External enums
# ==============================================================================

def find_header_candidates(source_root: str, token: str) -> list[str]:
    """Headers under source_root mentioning token as a word and containing 'enum'

    Shortest paths first.
    """
    pattern = re.compile(rf'\b{re.escape(token)}\b')
    candidates = []
    for dirpath, _dirnames, filenames in os.walk(source_root):
        for filename in filenames:
            if not filename.lower().endswith(HEADER_EXTENSIONS):
                continue
            full_path = os.path.join(dirpath, filename)
            try:
                with open(full_path, 'r', encoding='utf-8', errors='replace') as f:
                    source = f.read()
            except OSError:
                continue
            if token in source and 'enum' in source and pattern.search(source):
                candidates.append(full_path)
    return sorted(candidates, key=lambda p: (len(p), p))


def enum_probe_source(include_path: str, probe_type: str) -> str:
    return (f'#include "{include_path}"\n'
            f'{probe_type} __bindgen_enum_probe = static_cast<{probe_type}>(0);\n'
            f'int main() {{ return static_cast<int>(__bindgen_enum_probe); }}\n')


def parse_external_enum(ast: AstNode, simple_name: str, qualified_name: str) -> Optional[EnumInfo]:
    """Find the enum named by a probe in its AST

    Tries, in order: a typedef owning an anonymous enum, an enum with the
    exact name, and an enum whose first enumerator's type mentions the name.
    """
    enum_decls = find_ast_nodes(ast, lambda n: n.get('kind') == 'EnumDecl')
    by_id = {n['id']: n for n in enum_decls if isinstance(n.get('id'), str)}

    enum_decl = None
    typedefs = find_ast_nodes(ast, lambda n: n.get('kind') == 'TypedefDecl' and n.get('name') == simple_name)
    for typedef in typedefs:
        owner = find_descendant(typedef, lambda n: isinstance(n.get('ownedTagDecl'), dict))
        tag_id = owner['ownedTagDecl'].get('id') if owner else None
        if tag_id in by_id:
            enum_decl = by_id[tag_id]
            break

    if enum_decl is None:
        enum_decl = next((n for n in enum_decls if n.get('name') == simple_name), None)

    if enum_decl is None:
        for node in enum_decls:
            constants = [c for c in children(node) if c.get('kind') == 'EnumConstantDecl']
            if not constants:
                continue
            constant_type = constants[0].get('type', {}).get('qualType', '')
            if simple_name in constant_type or qualified_name in constant_type:
                enum_decl = node
                break

    if enum_decl is None:
        return None

    items = extract_enum_members(enum_decl)
    if not items:
        return None

    qualified = normalize_type(re.sub(r'^enum\s+', '', qualified_name))
    return EnumInfo(
        ts_name=simple_name,
        items=items,
        cpp_simple_name=simple_name,
        cpp_qualified_name=qualified,
        cpp_type_names={simple_name, qualified, f'enum {simple_name}'},
    )


class EnumResolver:
    """Resolves enum types declared outside the bound class"""

    def __init__(self, dumper: ClangAstDumper, source_root: str, namespace: str):
        self.dumper = dumper
        self.source_root = source_root
        self.namespace = namespace

    def _probe_types(self, qualified_name: str, simple_name: str) -> list[str]:
        probe_types = [qualified_name, simple_name]
        if '::' not in qualified_name and self.namespace:
            probe_types.append(f'{self.namespace}::{simple_name}')
        return list(dict.fromkeys(probe_types))

    def _attempts(self, qualified_name: str, simple_name: str) -> Iterator[tuple[str, str]]:
        for header in find_header_candidates(self.source_root, simple_name):
            include_path = os.path.relpath(header, self.source_root).replace(os.sep, '/')
            for probe_type in self._probe_types(qualified_name, simple_name):
                yield include_path, probe_type

    def resolve(self, type_name: str) -> Optional[EnumInfo]:
        """Resolve one enum type name; None when every candidate fails"""
        qualified_name = normalize_enum_lookup_name(type_name)
        simple_name = simple_type_name(qualified_name)
        if not simple_name:
            return None

        for include_path, probe_type in self._attempts(qualified_name, simple_name):
            logger.debug('probing %s as %s', include_path, probe_type)
            ast = self.dumper.dump_source(enum_probe_source(include_path, probe_type),
                                          ast_filter=simple_name)
            if ast is None:
                continue
            definition = parse_external_enum(ast, simple_name, qualified_name)
            if definition is not None:
                logger.info('resolved enum %s from %s', qualified_name, include_path)
                return definition

        logger.info('could not resolve enum candidate %s', qualified_name)
        return None
