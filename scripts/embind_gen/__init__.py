"""
embind_gen - embind binding generation framework for C++ classes

This framework provides building blocks for generating Emscripten embind
bindings and a TypeScript API from the clang AST JSON of one C++ class. It
is designed to be extended by library-specific configuration that names
the class, its namespace, path-like types and output locations.
"""

from .ir import MethodInfo, ParamInfo, MethodDoc, EnumInfo, EnumItem, TypeMetadata
from .errors import BindgenError, MissingSourceError, ClassNotFoundError, NameCollisionError
from .clang_ast import ClangAstDumper, DEFAULT_COMPILERS, parse_clang_json_output
from .types import TypeConverter
from .codegen import CodeGen, as_camel_case
from .methods import extract_public_methods, find_class_node
from .enum import EnumResolver, parse_class_enums
from .metadata import CastOverrides, build_type_metadata, collect_cast_overrides
from .func import FuncGenerator
from .interface import InterfaceGenerator
from .api_class import ApiClassGenerator
from .generator import ClassConfig, Generator

__all__ = [
    'MethodInfo', 'ParamInfo', 'MethodDoc', 'EnumInfo', 'EnumItem', 'TypeMetadata',
    'BindgenError', 'MissingSourceError', 'ClassNotFoundError', 'NameCollisionError',
    'ClangAstDumper', 'DEFAULT_COMPILERS', 'parse_clang_json_output',
    'TypeConverter',
    'CodeGen', 'as_camel_case',
    'extract_public_methods', 'find_class_node',
    'EnumResolver', 'parse_class_enums',
    'CastOverrides', 'build_type_metadata', 'collect_cast_overrides',
    'FuncGenerator',
    'InterfaceGenerator',
    'ApiClassGenerator',
    'ClassConfig', 'Generator',
]
