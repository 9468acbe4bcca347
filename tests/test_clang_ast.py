"""
Tests for clang AST acquisition and traversal.
"""

import json
import os
import subprocess

import pytest

from embind_gen.clang_ast import (
    ClangAstDumper, DOCUMENT_SET_KIND,
    parse_clang_json_output, iter_ast, walk_ast, find_ast_nodes, find_descendant,
)


class TestParseClangJsonOutput:
    """parse_clang_json_output"""

    def test_single_document(self):
        """A single JSON document is returned as-is"""
        ast = parse_clang_json_output('  {"kind": "TranslationUnitDecl", "inner": []}\n')
        assert ast == {'kind': 'TranslationUnitDecl', 'inner': []}

    def test_empty_output(self):
        assert parse_clang_json_output('') is None
        assert parse_clang_json_output('   \n') is None

    def test_concatenated_documents(self):
        """Filtered dumps print one document per match"""
        output = '{"kind": "CXXRecordDecl", "name": "A"}\n{"kind": "CXXMethodDecl", "name": "B"}\n'
        ast = parse_clang_json_output(output)
        assert ast['kind'] == DOCUMENT_SET_KIND
        assert [d['name'] for d in ast['inner']] == ['A', 'B']

    def test_braces_inside_strings(self):
        """Braces in string values do not split documents"""
        output = '{"value": "}{"}{"value": "a\\"}"}'
        ast = parse_clang_json_output(output)
        assert ast['kind'] == DOCUMENT_SET_KIND
        assert [d['value'] for d in ast['inner']] == ['}{', 'a"}']

    def test_broken_chunk(self):
        """Any unparsable chunk makes the whole output unusable"""
        assert parse_clang_json_output('{"a": 1}{"b": }') is None

    def test_garbage(self):
        assert parse_clang_json_output('error: unknown type name') is None


class TestTraversal:
    """Pre-order traversal helpers"""

    @pytest.fixture
    def tree(self):
        return {'kind': 'A', 'inner': [
            {'kind': 'B', 'inner': [{'kind': 'C'}, {'kind': 'D'}]},
            {'kind': 'E'},
        ]}

    def test_iter_ast_is_pre_order(self, tree):
        assert [n['kind'] for n in iter_ast(tree)] == ['A', 'B', 'C', 'D', 'E']

    def test_walk_ast(self, tree):
        seen = []
        walk_ast(tree, lambda n: seen.append(n['kind']))
        assert seen == ['A', 'B', 'C', 'D', 'E']

    def test_find_ast_nodes(self, tree):
        nodes = find_ast_nodes(tree, lambda n: 'inner' not in n)
        assert [n['kind'] for n in nodes] == ['C', 'D', 'E']

    def test_find_descendant_includes_root(self, tree):
        assert find_descendant(tree, lambda n: n['kind'] == 'A') is tree
        assert find_descendant(tree, lambda n: n['kind'] == 'D')['kind'] == 'D'
        assert find_descendant(tree, lambda n: n['kind'] == 'Z') is None

    def test_non_list_inner_is_leaf(self):
        assert [n['kind'] for n in iter_ast({'kind': 'A', 'inner': 'oops'})] == ['A']


class TestClangAstDumper:
    """ClangAstDumper with subprocess.run replaced"""

    AST_JSON = json.dumps({'kind': 'TranslationUnitDecl', 'inner': []})

    @pytest.fixture
    def calls(self):
        return []

    def _fake_run(self, calls, results):
        def fake_run(cmd, **kwargs):
            calls.append(list(cmd))
            result = results[cmd[0]]
            if isinstance(result, Exception):
                raise result
            returncode, stdout = result
            return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr='')
        return fake_run

    def test_command_line(self, monkeypatch, calls):
        monkeypatch.setattr(subprocess, 'run', self._fake_run(calls, {'clang++': (0, self.AST_JSON)}))
        dumper = ClangAstDumper('/src', compilers=['clang++'])

        ast = dumper.dump_file('/tmp/probe.cpp', ast_filter='FGFDMExec')

        assert ast['kind'] == 'TranslationUnitDecl'
        assert calls == [[
            'clang++', '-std=c++17', '-I', '/src', '-fsyntax-only',
            '-Xclang', '-ast-dump-filter=FGFDMExec',
            '-Xclang', '-ast-dump=json', '/tmp/probe.cpp',
        ]]

    def test_no_filter(self, monkeypatch, calls):
        monkeypatch.setattr(subprocess, 'run', self._fake_run(calls, {'clang++': (0, self.AST_JSON)}))
        ClangAstDumper('/src', compilers=['clang++']).dump_file('a.cpp')
        assert not any(arg.startswith('-ast-dump-filter') for arg in calls[0])

    def test_falls_back_to_next_compiler(self, monkeypatch, calls):
        """Missing binary and non-zero exit both move on to the next candidate"""
        monkeypatch.setattr(subprocess, 'run', self._fake_run(calls, {
            'clang-missing': FileNotFoundError('clang-missing'),
            'clang++': (1, ''),
            'clang': (0, self.AST_JSON),
        }))
        dumper = ClangAstDumper('/src', compilers=['clang-missing', 'clang++', 'clang'])

        assert dumper.dump_file('a.cpp') == {'kind': 'TranslationUnitDecl', 'inner': []}
        assert [c[0] for c in calls] == ['clang-missing', 'clang++', 'clang']

    def test_oversized_output_is_rejected(self, monkeypatch, calls):
        monkeypatch.setattr(subprocess, 'run', self._fake_run(calls, {'clang++': (0, self.AST_JSON)}))
        dumper = ClangAstDumper('/src', compilers=['clang++'], max_output=10)
        assert dumper.dump_file('a.cpp') is None

    def test_unparsable_output(self, monkeypatch, calls):
        monkeypatch.setattr(subprocess, 'run', self._fake_run(calls, {'clang++': (0, 'not json')}))
        assert ClangAstDumper('/src', compilers=['clang++']).dump_file('a.cpp') is None

    def test_all_candidates_fail(self, monkeypatch, calls):
        """Tool problems never raise"""
        monkeypatch.setattr(subprocess, 'run', self._fake_run(calls, {
            'clang++': OSError('exec format error'),
            'clang': (2, ''),
        }))
        assert ClangAstDumper('/src').dump_file('a.cpp') is None
        assert [c[0] for c in calls] == ['clang++', 'clang']

    def test_dump_source_cleans_up(self, monkeypatch, calls):
        """The probe is written to a prefixed temp dir removed afterwards"""
        written = {}

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            with open(cmd[-1], encoding='utf-8') as f:
                written['source'] = f.read()
            return subprocess.CompletedProcess(cmd, 0, stdout=self.AST_JSON, stderr='')

        monkeypatch.setattr(subprocess, 'run', fake_run)
        dumper = ClangAstDumper('/src', compilers=['clang++'], tmp_prefix='jsbsim-bindgen-')

        ast = dumper.dump_source('#include "FGFDMExec.h"\n', ast_filter='FGFDMExec')

        probe_path = calls[0][-1]
        assert ast['kind'] == 'TranslationUnitDecl'
        assert written['source'] == '#include "FGFDMExec.h"\n'
        assert os.path.basename(probe_path) == 'probe.cpp'
        assert os.path.basename(os.path.dirname(probe_path)).startswith('jsbsim-bindgen-')
        assert not os.path.exists(os.path.dirname(probe_path))

    def test_dump_source_cleans_up_on_error(self, monkeypatch, calls):
        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            raise RuntimeError('boom')

        monkeypatch.setattr(subprocess, 'run', fake_run)
        with pytest.raises(RuntimeError):
            ClangAstDumper('/src', compilers=['clang++']).dump_source('int x;')
        assert not os.path.exists(os.path.dirname(calls[0][-1]))
