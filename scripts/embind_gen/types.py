"""
Type conversion module

Maps C++ parameter/return types to the native wrapper signature, the
argument conversion expression, and the TypeScript type of the raw
interface.
"""

import re
from typing import Iterable, Optional, TYPE_CHECKING

from .codegen import (
    NUMERIC_TYPES, DEFAULT_PATH_TYPES,
    normalize_type, strip_const_volatile, normalize_enum_lookup_name,
    is_bool_type, is_numeric_type, is_string_type, is_path_type, is_vector_of_string_type,
    is_pointer_type, is_reference_type, base_type_for_pointer_cast,
)

if TYPE_CHECKING:
    from .ir import EnumInfo


# Classification outcomes
VOID = 'void'
BOOL = 'bool'
NUMBER = 'number'
STRING = 'string'
ENUM = 'enum'
STRING_ARRAY = 'string[]'
HANDLE = 'handle'

# Identifiers left alone when namespace-qualifying a type
CXX_PASSTHROUGH_TOKENS = {
    'const', 'volatile', 'unsigned', 'signed', 'short', 'long', 'int',
    'float', 'double', 'char', 'bool', 'void', 'size_t',
    'std', 'string', 'vector', 'shared_ptr', 'unique_ptr', 'uintptr_t',
}

_re_struct_class = re.compile(r'\b(struct|class)\s+')
_re_qualified_token = re.compile(r'\b[A-Za-z_][A-Za-z0-9_]*(?:::[A-Za-z_][A-Za-z0-9_]*)*\b')


class TypeConverter:
    """Manages type conversion between C++ and JavaScript"""

    def __init__(self, namespace: str, class_name: str,
                 path_types: Iterable[str] = DEFAULT_PATH_TYPES,
                 passthrough_tokens: Iterable[str] = (),
                 qualified_names: Optional[dict[str, str]] = None,
                 enum_lookup: Optional[dict[str, 'EnumInfo']] = None):
        self.namespace = namespace
        self.class_name = class_name
        self.path_types = tuple(path_types)
        self.passthrough = CXX_PASSTHROUGH_TOKENS | set(passthrough_tokens) | {class_name} | set(self.path_types)
        self.qualified_names = dict(qualified_names or {})
        self.enum_lookup: dict[str, 'EnumInfo'] = dict(enum_lookup or {})

    @classmethod
    def from_config(cls, config, enum_lookup: Optional[dict[str, 'EnumInfo']] = None) -> 'TypeConverter':
        return cls(
            namespace=config.namespace,
            class_name=config.class_name,
            path_types=config.path_types,
            passthrough_tokens=config.passthrough_tokens,
            qualified_names=config.qualified_names,
            enum_lookup=enum_lookup,
        )

    def with_enums(self, enum_lookup: dict[str, 'EnumInfo']) -> 'TypeConverter':
        """Copy of this converter using another enum lookup"""
        return TypeConverter(self.namespace, self.class_name, self.path_types,
                             self.passthrough, self.qualified_names, enum_lookup)

    # --------------------------------------------------------------------------
    # Enum lookup
    # --------------------------------------------------------------------------

    def lookup_variants(self, type_name: str) -> list[str]:
        """Every spelling under which an enum type may be looked up

        Examples (namespace JSBSim, class FGFDMExec):
            eMode -> eMode, JSBSim::eMode
            FGFDMExec::eMode -> FGFDMExec::eMode, JSBSim::FGFDMExec::eMode, eMode
        """
        base = normalize_enum_lookup_name(type_name)
        if not base:
            return []

        ns = f'{self.namespace}::' if self.namespace else ''
        owner = f'{self.class_name}::'
        variants = [base]

        def add(variant: str):
            if variant and variant not in variants:
                variants.append(variant)

        if ns and base.startswith(ns):
            add(base[len(ns):])
        elif ns:
            add(ns + base)
        if ns and base.startswith(owner):
            add(ns + base)
        if ns and base.startswith(ns + owner):
            add(base[len(ns):])
        if '::' in base:
            add(base.split('::')[-1])
        return variants

    def build_enum_lookup(self, definitions: Iterable['EnumInfo']) -> dict[str, 'EnumInfo']:
        lookup = {}
        for definition in definitions:
            for cpp_name in sorted(definition.cpp_type_names):
                for variant in self.lookup_variants(cpp_name):
                    lookup[variant] = definition
        return lookup

    def resolve_enum(self, type_name: str) -> Optional['EnumInfo']:
        for variant in self.lookup_variants(type_name):
            info = self.enum_lookup.get(variant)
            if info is not None:
                return info
        return None

    def _enum_by_value(self, type_str: str) -> Optional['EnumInfo']:
        """Enum passed by value or const reference"""
        if is_pointer_type(type_str):
            return None
        if is_reference_type(type_str) and not re.search(r'\bconst\b', type_str):
            return None
        return self.resolve_enum(type_str)

    # --------------------------------------------------------------------------
    # Classification
    # --------------------------------------------------------------------------

    def classify(self, type_str: str, is_return: bool = False) -> str:
        """Total classification of a C++ type; HANDLE is the fallback"""
        normalized = normalize_type(type_str)
        if self._enum_by_value(normalized) is not None:
            return ENUM
        if normalized == 'void':
            return VOID
        if is_bool_type(normalized):
            return BOOL
        if is_numeric_type(normalized):
            return NUMBER
        if is_string_type(normalized) or is_path_type(normalized, self.path_types):
            return STRING
        if is_return and is_vector_of_string_type(normalized):
            return STRING_ARRAY
        return HANDLE

    def ts_type(self, type_str: str, is_return: bool = False) -> str:
        """TypeScript type of the raw interface"""
        kind = self.classify(type_str, is_return)
        if kind == ENUM:
            return self._enum_by_value(normalize_type(type_str)).ts_name
        if kind == VOID:
            return 'void'
        if kind == BOOL:
            return 'boolean'
        if kind == STRING:
            return 'string'
        if kind == STRING_ARRAY:
            return 'string[]'
        return 'number'

    # --------------------------------------------------------------------------
    # Native wrapper
    # --------------------------------------------------------------------------

    def qualify_cpp_type(self, type_str: str) -> str:
        """Namespace-qualify the identifiers of a type

        Examples:
            FGPropagate* -> JSBSim::FGPropagate*
            std::vector<FGTrim> -> std::vector<JSBSim::FGTrim>
        """
        without_tag = _re_struct_class.sub('', type_str)

        def qualify(match: re.Match) -> str:
            token = match.group(0)
            if '::' in token or token in self.passthrough or token in NUMERIC_TYPES:
                return token
            if token in self.qualified_names:
                return self.qualified_names[token]
            if not self.namespace:
                return token
            return f'{self.namespace}::{token}'

        return _re_qualified_token.sub(qualify, without_tag)

    def enum_cpp_type(self, info: 'EnumInfo', type_str: str) -> str:
        """C++ spelling used to static_cast an integer to the enum"""
        if '::' in info.cpp_qualified_name:
            return info.cpp_qualified_name
        bare = strip_const_volatile(base_type_for_pointer_cast(type_str))
        return self.qualify_cpp_type(re.sub(r'^enum\s+', '', bare))

    def cpp_param_type(self, param_type: str) -> str:
        """Native parameter type of a wrapper function"""
        if is_bool_type(param_type):
            return 'bool'
        if is_numeric_type(param_type):
            return strip_const_volatile(param_type).replace('&', '').strip()
        if is_string_type(param_type) or is_path_type(param_type, self.path_types):
            return 'const std::string&'
        if self._enum_by_value(param_type) is not None:
            return 'int'
        return 'uintptr_t'

    def cpp_arg(self, param_type: str, arg_name: str) -> str:
        """Expression converting a wrapper argument back to the C++ type"""
        if is_bool_type(param_type) or is_numeric_type(param_type) or is_string_type(param_type):
            return arg_name

        if is_path_type(param_type, self.path_types):
            path_type = base_type_for_pointer_cast(strip_const_volatile(param_type))
            return f'{path_type}({arg_name})'

        info = self._enum_by_value(param_type)
        if info is not None:
            return f'static_cast<{self.enum_cpp_type(info, param_type)}>({arg_name})'

        if is_pointer_type(param_type):
            cast_type = self.qualify_cpp_type(normalize_type(param_type))
            return f'reinterpret_cast<{cast_type}>({arg_name})'

        if is_reference_type(param_type):
            base = self.qualify_cpp_type(base_type_for_pointer_cast(param_type))
            if re.search(r'\bconst\b', param_type) and not base.startswith('const '):
                base = f'const {base}'
            return f'*reinterpret_cast<{base}*>({arg_name})'

        base = self.qualify_cpp_type(base_type_for_pointer_cast(param_type))
        return f'*reinterpret_cast<{base}*>({arg_name})'

    def cpp_result(self, return_type: str, invoke: str) -> str:
        """Expression converting a call result to a transport value"""
        info = self._enum_by_value(return_type) if not is_reference_type(return_type) else None
        if info is not None:
            return f'toJsValue(static_cast<int>({invoke}))'
        return f'toJsValue({invoke})'
