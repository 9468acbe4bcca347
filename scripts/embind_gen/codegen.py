"""
Code generation utilities

Provides helpers for generating C++ and TypeScript code, plus the C++ type
string predicates shared by every generator.
"""

import re
from typing import Iterable


class CodeGen:
    """Code generation helper with indentation support"""

    def __init__(self, indent_str: str = '  '):
        self._lines: list[str] = []
        self._indent: int = 0
        self._indent_str: str = indent_str

    def line(self, text: str = ''):
        """Add a line with current indentation"""
        if text:
            self._lines.append(self._indent_str * self._indent + text)
        else:
            self._lines.append('')

    def lines(self, *texts: str):
        """Add multiple lines"""
        for text in texts:
            self.line(text)

    def raw(self, text: str):
        """Add raw text without indentation processing"""
        self._lines.append(text)

    def indent(self):
        """Increase indentation"""
        self._indent += 1

    def dedent(self):
        """Decrease indentation"""
        if self._indent > 0:
            self._indent -= 1

    def block(self, header: str, footer: str = '}'):
        """Context manager for code blocks"""
        return _BlockContext(self, header, footer)

    def output(self) -> str:
        """Get generated code as string"""
        return '\n'.join(self._lines)


class _BlockContext:
    """Context manager for indented code blocks"""

    def __init__(self, gen: CodeGen, header: str, footer: str):
        self._gen = gen
        self._header = header
        self._footer = footer

    def __enter__(self):
        self._gen.line(self._header)
        self._gen.indent()
        return self

    def __exit__(self, *args):
        self._gen.dedent()
        self._gen.line(self._footer)


# ==============================================================================
# C++ type predicates
# ==============================================================================

NUMERIC_TYPES = {
    'char', 'signed char', 'unsigned char',
    'short', 'unsigned short',
    'int', 'unsigned int',
    'long', 'unsigned long',
    'long long', 'unsigned long long',
    'float', 'double', 'long double',
    'size_t',
}

DEFAULT_PATH_TYPES = ('SGPath',)

_re_spaces = re.compile(r'\s+')
_re_punct = re.compile(r'\s*([*&<>,])\s*')
_re_const = re.compile(r'\bconst\b\s*')
_re_cv = re.compile(r'\b(const|volatile)\b')


def normalize_type(type_str: str) -> str:
    """Canonical spelling of a C++ type

    Examples:
        const  std::string & -> const std::string&
        std::vector< std::string > -> std::vector<std::string>
    """
    out = _re_spaces.sub(' ', type_str)
    out = _re_punct.sub(r'\1', out)
    out = _re_const.sub('const ', out)
    return out.strip()


def strip_const_volatile(type_str: str) -> str:
    """Remove const/volatile qualifiers"""
    return _re_spaces.sub(' ', _re_cv.sub('', type_str)).strip()


def _bare(type_str: str) -> str:
    """Value spelling of a type; pointers keep their '*'"""
    return strip_const_volatile(type_str).replace('&', '').strip()


def is_bool_type(type_str: str) -> bool:
    """Check if type is bool (any qualification)"""
    return _bare(type_str) == 'bool'


def is_numeric_type(type_str: str) -> bool:
    """Check if type is an arithmetic type other than bool"""
    return _re_spaces.sub(' ', _bare(type_str)) in NUMERIC_TYPES


def is_string_type(type_str: str) -> bool:
    """Check if type is std::string"""
    return _bare(type_str) == 'std::string'


def is_path_type(type_str: str, path_types: Iterable[str] = DEFAULT_PATH_TYPES) -> bool:
    """Check if type is a filesystem path class constructible from a string"""
    return _bare(type_str) in set(path_types)


def is_vector_of_string_type(type_str: str) -> bool:
    """Check if type is std::vector<std::string>"""
    return _re_spaces.sub('', _bare(type_str)) == 'std::vector<std::string>'


def is_pointer_type(type_str: str) -> bool:
    return '*' in type_str


def is_reference_type(type_str: str) -> bool:
    return '&' in type_str


def base_type_for_pointer_cast(type_str: str) -> str:
    """Strip pointer/reference markers

    Examples:
        const FGPropagate* -> const FGPropagate
        FGState& -> FGState
    """
    return normalize_type(type_str.replace('&', '').replace('*', '').strip())


def normalize_enum_lookup_name(type_str: str) -> str:
    """Key used to match enum spellings: no cv, no 'enum ', no markers, no spaces"""
    out = strip_const_volatile(type_str)
    out = re.sub(r'\benum\s+', '', out)
    out = out.replace('&', '').replace('*', '')
    return _re_spaces.sub('', out).strip()


def simple_type_name(type_str: str) -> str:
    """Last component of a qualified name (JSBSim::FGFDMExec::eMode -> eMode)"""
    return type_str.split('::')[-1]


_re_enum_like = re.compile(r'^e[A-Z]|Mode$|Type$')


def looks_like_enum_type_name(type_str: str, path_types: Iterable[str] = DEFAULT_PATH_TYPES) -> bool:
    """Naming heuristic for enum types that are not declared in the class

    Matches eSomething, SomethingMode and SomethingType.
    """
    normalized = normalize_type(re.sub(r'^enum\s+', '', _bare(type_str).replace('*', '')))
    if not normalized or normalized == 'void':
        return False
    if (is_bool_type(normalized) or is_numeric_type(normalized) or is_string_type(normalized)
            or is_path_type(normalized, path_types) or is_vector_of_string_type(normalized)):
        return False
    if '<' in normalized:
        return False
    return _re_enum_like.search(simple_type_name(normalized)) is not None


# ==============================================================================
# Naming
# ==============================================================================

_re_word = re.compile(r'[A-Z]{2,}s(?=$|[A-Z_])|[A-Z]+(?![a-z])|[A-Z][a-z]*|[a-z]+|[0-9]+')


def _split_set_get(tokens: list[str]) -> list[str]:
    if not tokens:
        return tokens
    first, rest = tokens[0], tokens[1:]
    first_lower = first.lower()
    for verb in ('set', 'get'):
        if first_lower.startswith(verb) and len(first_lower) > 3:
            return [verb, first_lower[3:]] + [t.lower() for t in rest]
    return [first_lower] + rest


def split_name_into_words(name: str) -> list[str]:
    """Tokenize a C++ identifier

    Examples:
        LoadModel -> ['load', 'Model']
        RunIC -> ['run', 'IC']
        GetPropertyCatalog -> ['get', 'Property', 'Catalog']
    """
    tokens = []
    for part in (p for p in name.split('_') if p):
        tokens.extend(_re_word.findall(part) or [part])
    return [t for t in _split_set_get(tokens) if t]


def as_camel_case(name: str) -> str:
    """Convert a C++ method name to a camelCase API name

    Examples:
        LoadModel -> loadModel
        RunIC -> runIC
        Set_debug_level -> setDebugLevel
    """
    words = split_name_into_words(name)
    if not words:
        return name[:1].lower() + name[1:]
    head, tail = words[0], words[1:]
    return head + ''.join(word[:1].upper() + word[1:] for word in tail)
