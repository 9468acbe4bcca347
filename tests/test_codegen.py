"""
Tests for code generation helpers, type predicates and naming.
"""

import pytest

from embind_gen.codegen import (
    CodeGen,
    normalize_type, normalize_enum_lookup_name, base_type_for_pointer_cast,
    is_bool_type, is_numeric_type, is_string_type, is_path_type, is_vector_of_string_type,
    looks_like_enum_type_name, split_name_into_words, as_camel_case,
)


class TestCodeGen:
    """CodeGen indentation and blocks"""

    def test_block_indents(self):
        gen = CodeGen()
        with gen.block('namespace {'):
            gen.line('int x = 0;')
            gen.line()
        assert gen.output() == 'namespace {\n  int x = 0;\n\n}'

    def test_custom_indent(self):
        gen = CodeGen(indent_str='    ')
        with gen.block('void f() {'):
            gen.line('return;')
        assert gen.output() == 'void f() {\n    return;\n}'

    def test_raw_is_not_indented(self):
        gen = CodeGen()
        gen.indent()
        gen.raw('#define X 1')
        assert gen.output() == '#define X 1'

    def test_dedent_stops_at_zero(self):
        gen = CodeGen()
        gen.dedent()
        gen.line('x')
        assert gen.output() == 'x'


class TestTypePredicates:
    """C++ type string predicates"""

    @pytest.mark.parametrize('raw,expected', [
        ('const  std::string &', 'const std::string&'),
        ('std::vector< std::string >', 'std::vector<std::string>'),
        ('FGPropagate *', 'FGPropagate*'),
        ('std::map<int, double>', 'std::map<int,double>'),
    ])
    def test_normalize_type(self, raw, expected):
        assert normalize_type(raw) == expected

    def test_numeric(self):
        assert is_numeric_type('double')
        assert is_numeric_type('const unsigned int&')
        assert is_numeric_type('size_t')
        assert not is_numeric_type('bool')
        assert not is_numeric_type('FGPropagate*')
        assert not is_numeric_type('int *')
        assert not is_numeric_type('const char*')

    def test_bool(self):
        assert is_bool_type('bool')
        assert is_bool_type('const bool&')
        assert not is_bool_type('int')
        assert not is_bool_type('bool*')

    def test_string_and_path(self):
        assert is_string_type('const std::string&')
        assert not is_string_type('std::vector<std::string>')
        assert is_path_type('const SGPath&')
        assert not is_path_type('const SGPath&', path_types=())

    def test_vector_of_string(self):
        assert is_vector_of_string_type('std::vector<std::string>')
        assert is_vector_of_string_type('const std::vector< std::string >&')
        assert not is_vector_of_string_type('std::vector<double>')

    def test_base_type_for_pointer_cast(self):
        assert base_type_for_pointer_cast('const FGPropagate*') == 'const FGPropagate'
        assert base_type_for_pointer_cast('FGState&') == 'FGState'

    def test_normalize_enum_lookup_name(self):
        assert normalize_enum_lookup_name('const enum JSBSim::FGFDMExec::eMode &') == 'JSBSim::FGFDMExec::eMode'
        assert normalize_enum_lookup_name('eMode') == 'eMode'

    @pytest.mark.parametrize('type_name,expected', [
        ('eTemperature', True),
        ('JSBSim::FGFDMExec::eMode', True),
        ('const TrimMode&', True),
        ('FGJSBBase::eMoments', True),
        ('IntegrationType', True),
        ('FGPropagate*', False),
        ('double', False),
        ('bool', False),
        ('std::string', False),
        ('SGPath', False),
        ('void', False),
        ('std::vector<eMode>', False),
        ('events', False),
    ])
    def test_looks_like_enum_type_name(self, type_name, expected):
        assert looks_like_enum_type_name(type_name) is expected


class TestNaming:
    """camelCase conversion of method names"""

    @pytest.mark.parametrize('name,expected', [
        ('Run', 'run'),
        ('RunIC', 'runIC'),
        ('LoadModel', 'loadModel'),
        ('GetPropertyCatalog', 'getPropertyCatalog'),
        ('SetDebugLevel', 'setDebugLevel'),
        ('Set_debug_level', 'setDebugLevel'),
        ('GetFDMsByName', 'getFDMsByName'),
        ('Setdt', 'setDt'),
        ('getdt', 'getDt'),
        ('foo', 'foo'),
        ('Foo', 'foo'),
        ('Get2DArray', 'get2DArray'),
    ])
    def test_as_camel_case(self, name, expected):
        assert as_camel_case(name) == expected

    def test_split_name_into_words(self):
        assert split_name_into_words('LoadModel') == ['load', 'Model']
        assert split_name_into_words('RunIC') == ['run', 'IC']
        assert split_name_into_words('SetdtValue') == ['set', 'dt', 'value']

    def test_underscores_only(self):
        assert as_camel_case('_') == '_'
