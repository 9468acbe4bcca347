"""
Main generator module

Orchestrates all components to generate embind bindings, the raw
TypeScript interface and the ergonomic API class for a C++ class.
"""

import logging
import os
from typing import Optional

from .clang_ast import ClangAstDumper, DEFAULT_COMPILERS, DEFAULT_MAX_OUTPUT
from .codegen import CodeGen, DEFAULT_PATH_TYPES
from .errors import MissingSourceError
from .enum import EnumResolver
from .func import FuncGenerator, TO_JS_VALUE_PREAMBLE
from .interface import GENERATED_BANNER, InterfaceGenerator
from .api_class import ApiClassGenerator
from .ir import MethodInfo, TypeMetadata
from .metadata import build_type_metadata, load_cast_overrides
from .methods import extract_public_methods, load_class_node
from .types import TypeConverter

logger = logging.getLogger(__name__)

CPP_SYSTEM_INCLUDES = ['cstdint', 'memory', 'string', 'type_traits', 'vector']


class ClassConfig:
    """Configuration for one bound class"""

    def __init__(self, class_name: str):
        self.class_name = class_name
        self.namespace = ''
        self.header = f'{class_name}.h'
        self.implementation: Optional[str] = f'{class_name}.cpp'
        self.cpp_output = f'generated/{class_name}Bindings.cpp'
        self.interface_output = f'src/generated/{class_name.lower()}-api.ts'
        self.api_output = f'src/generated/{class_name.lower()}-wrapper.ts'
        self.interface_name = f'{class_name}Api'
        self.api_class_name = f'{class_name}Wrapper'
        self.bindings_name = f'{class_name.lower()}_bindings'
        self.ignores: set[str] = set()
        self.path_types: tuple[str, ...] = DEFAULT_PATH_TYPES
        self.passthrough_tokens: set[str] = set()
        self.qualified_names: dict[str, str] = {}
        self.cpp_usings: list[str] = []
        self.value_conversions: list[str] = []

    def ignore(self, *names: str):
        """Leave methods out of the ergonomic API class"""
        self.ignores.update(names)

    @property
    def interface_module(self) -> str:
        """Import specifier of the interface file, relative to the API class file"""
        rel = os.path.relpath(self.interface_output, os.path.dirname(self.api_output) or '.')
        rel = os.path.splitext(rel)[0].replace(os.sep, '/')
        return rel if rel.startswith('.') else f'./{rel}'


class Generator:
    """Main binding generator"""

    def __init__(self, source_root: str, output_root: str,
                 compilers: Optional[list[str]] = None, std: str = 'c++17',
                 tmp_prefix: str = 'bindgen-', max_output: int = DEFAULT_MAX_OUTPUT):
        self.source_root = source_root
        self.output_root = output_root
        self.compilers = list(compilers) if compilers else list(DEFAULT_COMPILERS)
        self.std = std
        self.tmp_prefix = tmp_prefix
        self.max_output = max_output
        self._classes: dict[str, ClassConfig] = {}

    def bind_class(self, class_name: str) -> ClassConfig:
        """Get or create class configuration"""
        if class_name not in self._classes:
            self._classes[class_name] = ClassConfig(class_name)
        return self._classes[class_name]

    def make_dumper(self) -> ClangAstDumper:
        return ClangAstDumper(self.source_root, self.compilers, self.std,
                              self.max_output, self.tmp_prefix)

    def generate_all(self):
        """Generate bindings for all configured classes"""
        print('=== Generating embind bindings:')
        for class_name in self._classes:
            self.generate_class(class_name)

    def generate_class(self, class_name: str) -> dict[str, str]:
        """Generate and write the three artifacts for one class

        Returns the written files (path -> content).
        """
        config = self.bind_class(class_name)
        header_path = os.path.join(self.source_root, config.header)
        if not os.path.exists(header_path):
            raise MissingSourceError(f'Missing {class_name} header: {header_path}',
                                     {'source_root': self.source_root})

        dumper = self.make_dumper()
        include_path = os.path.relpath(header_path, self.source_root).replace(os.sep, '/')
        class_node = load_class_node(dumper, include_path, class_name)
        methods = extract_public_methods(class_node, config.path_types)
        logger.info('%s: %d public methods', class_name, len(methods))

        type_conv = TypeConverter.from_config(config)
        impl_path = os.path.join(self.source_root, config.implementation) if config.implementation else None
        cast_overrides = load_cast_overrides(dumper, impl_path, class_name, methods)
        resolver = EnumResolver(dumper, self.source_root, config.namespace)
        metadata = build_type_metadata(methods, class_node, type_conv, cast_overrides, resolver)

        outputs = self.render(config, methods, metadata)
        for rel_path, content in outputs.items():
            self._write(rel_path, content)

        self._print_summary(methods, metadata, outputs)
        return outputs

    def render(self, config: ClassConfig, methods: list[MethodInfo],
               metadata: TypeMetadata) -> dict[str, str]:
        """Render every artifact in memory (output path -> content)"""
        type_conv = TypeConverter.from_config(config, metadata.enum_lookup)
        cpp_code = self._generate_cpp_code(config, methods, type_conv)
        interface = InterfaceGenerator(type_conv, metadata, config.interface_name).generate(methods)
        api_class = ApiClassGenerator(
            type_conv, metadata,
            class_name=config.api_class_name,
            interface_name=config.interface_name,
            interface_module=config.interface_module,
            ignore=config.ignores,
        ).generate(methods)
        return {
            config.cpp_output: cpp_code,
            config.interface_output: interface,
            config.api_output: api_class,
        }

    def _generate_cpp_code(self, config: ClassConfig, methods: list[MethodInfo],
                           type_conv: TypeConverter) -> str:
        """Generate embind C++ code"""
        gen = CodeGen()
        func_gen = FuncGenerator(type_conv, config.class_name)

        gen.lines(*GENERATED_BANNER)
        gen.line()
        for include in CPP_SYSTEM_INCLUDES:
            gen.line(f'#include <{include}>')
        gen.line()
        gen.line('#include <emscripten/bind.h>')
        gen.line('#include <emscripten/val.h>')
        gen.line()
        gen.line(f'#include "{os.path.basename(config.header)}"')
        gen.line()

        gen.line('namespace {')
        gen.line()
        usings = [f'{config.namespace}::{config.class_name}'] if config.namespace else []
        usings += config.cpp_usings
        if usings:
            gen.lines(*(f'using {using};' for using in usings))
            gen.line()
        gen.raw(TO_JS_VALUE_PREAMBLE)
        gen.line()
        for conversion in config.value_conversions:
            gen.raw(conversion)
            gen.line()

        for index, method in enumerate(methods):
            func_gen.generate(method, index, gen)

        gen.line('}  // namespace')
        gen.line()
        func_gen.generate_registration(methods, config.bindings_name, gen)
        gen.line()
        return gen.output()

    def _write(self, rel_path: str, content: str):
        path = os.path.join(self.output_root, rel_path)
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        with open(path, 'w', newline='\n', encoding='utf-8') as f:
            f.write(content)

    def _print_summary(self, methods: list[MethodInfo], metadata: TypeMetadata, outputs: dict[str, str]):
        print(f'Generated {len(methods)} method bindings.')
        print(f'Detected {len(metadata.enum_defs)} enum type map(s) '
              f'and {len(metadata.flag_defs)} flag map(s).')
        if metadata.unresolved_enum_types:
            print(f'Unresolved enum candidates: {", ".join(sorted(metadata.unresolved_enum_types))}')
        for rel_path in outputs:
            print(f'- {rel_path}')
