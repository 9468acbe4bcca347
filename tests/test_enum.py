"""
Tests for enum discovery: class body enums, flag groups and external headers.
"""

import os

import pytest

from embind_gen.enum import (
    EnumResolver, add_enum_definition, enum_probe_source, extract_enum_members,
    find_header_candidates, parse_class_enums, parse_external_enum,
)
from embind_gen.ir import EnumInfo, EnumItem

from clang_fixtures import (
    FakeDumper, access, enum_decl, flag_constant, full_comment, method, paragraph, param, record,
    translation_unit,
)


def items(definition):
    return [(item.name, item.value) for item in definition.items]


class TestEnumMembers:
    """extract_enum_members"""

    def test_implicit_values(self):
        decl = enum_decl('eMode', [('tA', None), ('tB', None), ('tC', None)])
        assert [(i.name, i.value) for i in extract_enum_members(decl)] == [('tA', 0), ('tB', 1), ('tC', 2)]

    def test_explicit_values_restart_counting(self):
        decl = enum_decl('eMode', [('tA', None), ('tB', 5), ('tC', None), ('tD', -1), ('tE', None)])
        assert [(i.name, i.value) for i in extract_enum_members(decl)] == [
            ('tA', 0), ('tB', 5), ('tC', 6), ('tD', -1), ('tE', 0)]


class TestClassEnums:
    """parse_class_enums"""

    @pytest.fixture
    def class_node(self):
        return record('FGFDMExec', [
            access('private'),
            enum_decl('eHidden', [('hA', None)]),
            access('public'),
            enum_decl('eMode', [('tA', None), ('tB', None), ('tC', None)]),
            enum_decl('eEmpty', []),
            flag_constant('START_NEW_OUTPUT', 1,
                          full_comment(paragraph('Mode flags for `ResetToInitialConditions`'))),
            flag_constant('DONT_EXECUTE_RUN_IC', 2),
            method('Run', 'bool'),
            flag_constant('STRAY_CONSTANT', 4),
        ])

    def test_enum_definition(self, class_node):
        enum_defs, _ = parse_class_enums(class_node, 'JSBSim')
        assert [d.ts_name for d in enum_defs] == ['FGFDMExecMode']

        mode = enum_defs[0]
        assert items(mode) == [('tA', 0), ('tB', 1), ('tC', 2)]
        assert mode.cpp_simple_name == 'eMode'
        assert mode.cpp_qualified_name == 'JSBSim::FGFDMExec::eMode'
        assert {'eMode', 'FGFDMExec::eMode', 'JSBSim::FGFDMExec::eMode'} <= mode.cpp_type_names

    def test_flag_group(self, class_node):
        """The group ends at the first non-constant declaration"""
        _, flag_defs = parse_class_enums(class_node, 'JSBSim')
        assert len(flag_defs) == 1

        flags = flag_defs[0]
        assert flags.ts_name == 'ResetToInitialConditionsMode'
        assert flags.is_flags
        assert flags.method_name == 'ResetToInitialConditions'
        assert items(flags) == [('START_NEW_OUTPUT', 1), ('DONT_EXECUTE_RUN_IC', 2)]

    def test_flag_comment_case_insensitive(self):
        node = record('FGFDMExec', [
            access('public'),
            flag_constant('A', 1, full_comment(paragraph('mode flags for Trim'))),
        ])
        _, flag_defs = parse_class_enums(node, 'JSBSim')
        assert flag_defs[0].ts_name == 'TrimMode'

    def test_access_change_ends_flag_group(self):
        node = record('FGFDMExec', [
            access('public'),
            flag_constant('A', 1, full_comment(paragraph('Mode flags for Trim'))),
            access('protected'),
            access('public'),
            flag_constant('B', 2),
        ])
        _, flag_defs = parse_class_enums(node, 'JSBSim')
        assert items(flag_defs[0]) == [('A', 1)]

    def test_no_namespace(self, class_node):
        enum_defs, _ = parse_class_enums(class_node, '')
        assert enum_defs[0].cpp_qualified_name == 'FGFDMExec::eMode'

    def test_first_definition_wins(self):
        first = EnumInfo('TrimMode', [EnumItem('a', 0)], cpp_qualified_name='JSBSim::TrimMode')
        second = EnumInfo('TrimMode', [EnumItem('b', 0)], cpp_qualified_name='TrimMode')
        other = EnumInfo('Other', [EnumItem('c', 0)], cpp_qualified_name='JSBSim::TrimMode')

        defs = add_enum_definition([], first)
        assert add_enum_definition(defs, second) == [first]
        assert add_enum_definition(defs, other) == [first]
        assert defs == [first]


class TestHeaderCandidates:
    """find_header_candidates"""

    @pytest.fixture
    def source_root(self, tmp_path):
        files = {
            'initialization/FGTrim.h': 'namespace JSBSim {\nenum TrimMode { tLongitudinal=0, tFull };\n}\n',
            'FGFDMExec.h': '#include "initialization/FGTrim.h"\nvoid DoTrim(int mode); // TrimMode\n',
            'models/FGFCS.h': 'enum eTrimModeX { a };\n',
            'models/FGFCS.cpp': 'enum TrimMode { x };\n',
            'math/FGTable.hpp': 'enum class Kind { TrimMode };\n',
        }
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return tmp_path

    def test_candidates(self, source_root):
        """Whole-word matches in headers containing 'enum', shortest path first"""
        found = [os.path.relpath(p, source_root).replace(os.sep, '/')
                 for p in find_header_candidates(str(source_root), 'TrimMode')]
        assert found == ['math/FGTable.hpp', 'initialization/FGTrim.h']

    def test_missing_root(self, tmp_path):
        assert find_header_candidates(str(tmp_path / 'nope'), 'TrimMode') == []


class TestExternalEnum:
    """parse_external_enum"""

    def test_exact_name(self):
        ast = translation_unit(enum_decl('TrimMode', [('tLongitudinal', None), ('tFull', None)]))
        definition = parse_external_enum(ast, 'TrimMode', 'JSBSim::TrimMode')
        assert definition.ts_name == 'TrimMode'
        assert definition.cpp_qualified_name == 'JSBSim::TrimMode'
        assert items(definition) == [('tLongitudinal', 0), ('tFull', 1)]

    def test_typedef_of_anonymous_enum(self):
        anonymous = enum_decl(None, [('eX', None), ('eY', None)])
        typedef = {'kind': 'TypedefDecl', 'name': 'eAxis', 'inner': [
            {'kind': 'ElaboratedType', 'ownedTagDecl': {'id': anonymous['id'], 'kind': 'EnumDecl'}},
        ]}
        ast = translation_unit(enum_decl('eOther', [('o', 3)]), anonymous, typedef)
        definition = parse_external_enum(ast, 'eAxis', 'eAxis')
        assert items(definition) == [('eX', 0), ('eY', 1)]

    def test_by_enumerator_type(self):
        decl = enum_decl('Unrelated', [('a', 7)])
        decl['inner'][0]['type'] = {'qualType': 'JSBSim::FGJSBBase::eMoments'}
        ast = translation_unit(decl)
        definition = parse_external_enum(ast, 'eMoments', 'FGJSBBase::eMoments')
        assert items(definition) == [('a', 7)]

    def test_not_found(self):
        ast = translation_unit(enum_decl('Other', [('a', None)]))
        assert parse_external_enum(ast, 'TrimMode', 'TrimMode') is None


class TestEnumResolver:
    """EnumResolver with a stand-in dumper"""

    @pytest.fixture
    def source_root(self, tmp_path):
        header = tmp_path / 'initialization' / 'FGTrim.h'
        header.parent.mkdir(parents=True)
        header.write_text('enum TrimMode { tLongitudinal=0, tFull };\n')
        return tmp_path

    def test_probe_sequence(self, source_root):
        """Each probe spelling is tried until one yields the enum"""
        probes = {'TrimMode': translation_unit(enum_decl('TrimMode', [('tLongitudinal', None), ('tFull', None)]))}
        dumper = FakeDumper('FGFDMExec', None, probes=probes)
        resolver = EnumResolver(dumper, str(source_root), 'JSBSim')

        definition = resolver.resolve('const TrimMode&')

        assert definition.ts_name == 'TrimMode'
        source, ast_filter = dumper.sources[0]
        assert ast_filter == 'TrimMode'
        assert source == enum_probe_source('initialization/FGTrim.h', 'TrimMode')

    def test_unresolved(self, source_root):
        dumper = FakeDumper('FGFDMExec', None)
        resolver = EnumResolver(dumper, str(source_root), 'JSBSim')

        assert resolver.resolve('TrimMode') is None
        probe_types = [src.splitlines()[1].split(' ')[0] for src, _ in dumper.sources]
        assert probe_types == ['TrimMode', 'JSBSim::TrimMode']

    def test_no_candidate_headers(self, source_root):
        dumper = FakeDumper('FGFDMExec', None)
        assert EnumResolver(dumper, str(source_root), 'JSBSim').resolve('eUnknown') is None
        assert dumper.sources == []

    def test_probe_source(self):
        source = enum_probe_source('initialization/FGTrim.h', 'JSBSim::TrimMode')
        assert source.splitlines() == [
            '#include "initialization/FGTrim.h"',
            'JSBSim::TrimMode __bindgen_enum_probe = static_cast<JSBSim::TrimMode>(0);',
            'int main() { return static_cast<int>(__bindgen_enum_probe); }',
        ]
