"""
IR (Intermediate Representation) module

Dataclasses describing what the generators consume: the public methods of
a C++ class and the enum/flag metadata resolved for them.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class MethodDoc:
    """Parsed documentation comment of a method"""
    description_lines: list[str] = field(default_factory=list)
    param_docs_by_name: dict[str, str] = field(default_factory=dict)
    param_docs_by_index: dict[int, str] = field(default_factory=dict)
    returns: str = ''

    def param_text(self, index: int, name: str) -> str:
        """Doc text of a parameter, positional entry first"""
        if index in self.param_docs_by_index:
            return self.param_docs_by_index[index]
        return self.param_docs_by_name.get(name, '')


@dataclass
class ParamInfo:
    """Method parameter information"""
    name: str
    type: str
    # TypeScript literal (true, -1.5, "abc", ""), None when not representable
    default_value: Optional[str] = None


@dataclass
class MethodInfo:
    """Public member function of the bound class"""
    name: str
    return_type: str
    params: list[ParamInfo]
    doc: MethodDoc = field(default_factory=MethodDoc)

    @property
    def param_types(self) -> list[str]:
        return [p.type for p in self.params]


@dataclass
class EnumItem:
    """Enum member (constant)"""
    name: str
    value: int


@dataclass
class EnumInfo:
    """Resolved enumeration or flag group

    kind is 'enum' for C++ enumerations and 'flags' for groups of static
    integer constants documented as mode flags of one method.
    """
    ts_name: str
    items: list[EnumItem]
    kind: str = 'enum'
    cpp_simple_name: str = ''
    cpp_qualified_name: str = ''
    cpp_type_names: set[str] = field(default_factory=set)
    method_name: str = ''  # owning method, flags only

    @property
    def is_flags(self) -> bool:
        return self.kind == 'flags'


@dataclass
class TypeMetadata:
    """Everything the renderers need to know about enum-like types"""
    enum_defs: list[EnumInfo] = field(default_factory=list)
    flag_defs: list[EnumInfo] = field(default_factory=list)
    # every accepted spelling -> definition
    enum_lookup: dict[str, EnumInfo] = field(default_factory=dict)
    # method signature key -> {param index -> TS type name}
    param_type_overrides: dict[str, dict[int, str]] = field(default_factory=dict)
    # method signature key -> TS type name
    return_type_overrides: dict[str, str] = field(default_factory=dict)
    unresolved_enum_types: set[str] = field(default_factory=set)
