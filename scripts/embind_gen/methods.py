"""
Method extraction module

Locates the bound class in a clang JSON AST and extracts its public member
functions with parameters, literal default values and parsed doc comments.
"""

import logging
import re
from typing import Optional

from .clang_ast import AstNode, children, find_ast_nodes, find_descendant, iter_ast
from .codegen import is_bool_type, is_path_type, is_string_type, normalize_type, DEFAULT_PATH_TYPES
from .errors import ClassNotFoundError
from .ir import MethodDoc, MethodInfo, ParamInfo

logger = logging.getLogger(__name__)

_re_identifier = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_re_operator = re.compile(r'^operator\b')
_re_number = re.compile(r'^[-+]?\d+(\.\d*)?([eE][-+]?\d+)?$')

# Expression nodes that do not change the value of a default argument
EXPR_WRAPPER_KINDS = {
    'ExprWithCleanups',
    'MaterializeTemporaryExpr',
    'ImplicitCastExpr',
    'CXXBindTemporaryExpr',
    'CXXDefaultArgExpr',
    'ConstantExpr',
    'ParenExpr',
}


# ==============================================================================
# Doc comments
# ==============================================================================

def _sanitize_comment_line(text: str) -> str:
    collapsed = ' '.join(text.split())
    collapsed = re.sub(r'^[@{]+\s*', '', collapsed)
    collapsed = re.sub(r'\s*[@}]+$', '', collapsed).strip()
    if collapsed in ('', '@', '{', '}'):
        return ''
    return collapsed


def collect_comment_text(node: Optional[AstNode]) -> str:
    """Join the TextComment fragments below node into one line"""
    if not node:
        return ''
    lines = []
    for inner in iter_ast(node):
        if inner.get('kind') != 'TextComment' or not isinstance(inner.get('text'), str):
            continue
        line = _sanitize_comment_line(inner['text'])
        if line:
            lines.append(line)
    return ' '.join(lines).strip()


def find_full_comment(node: AstNode) -> Optional[AstNode]:
    for child in children(node):
        if child.get('kind') == 'FullComment':
            return child
    return None


def parse_method_comment(full_comment: Optional[AstNode]) -> MethodDoc:
    """Split a FullComment into description, @param and @return text"""
    doc = MethodDoc()
    if not full_comment:
        return doc

    for child in children(full_comment):
        kind = child.get('kind')

        if kind == 'ParagraphComment':
            text = collect_comment_text(child)
            if text:
                doc.description_lines.append(text)

        elif kind == 'ParamCommandComment':
            text = collect_comment_text(child)
            if not text:
                continue
            param_name = child.get('param')
            if isinstance(param_name, str) and param_name:
                doc.param_docs_by_name[param_name] = text
            param_idx = child.get('paramIdx')
            if isinstance(param_idx, int) and not isinstance(param_idx, bool):
                doc.param_docs_by_index[param_idx] = text

        elif kind == 'BlockCommandComment':
            command = str(child.get('name', '')).lower()
            if command in ('return', 'returns'):
                doc.returns = collect_comment_text(child)

    return doc


# ==============================================================================
# Default values
# ==============================================================================

def unwrap_expr(node: Optional[AstNode]) -> Optional[AstNode]:
    """Descend through implicit casts, temporaries and parentheses"""
    current = node
    seen = set()
    while isinstance(current, dict) and current.get('kind') in EXPR_WRAPPER_KINDS:
        if id(current) in seen:
            break
        seen.add(id(current))
        inner = children(current)
        if not inner:
            break
        current = inner[0]
    return current


def _number_literal(value) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and _re_number.match(value.strip()):
        return value.strip()
    return None


def _as_param_literal(literal: Optional[str], param_type: str) -> Optional[str]:
    """bool flag = 0 -> false"""
    if literal is None or not is_bool_type(param_type):
        return literal
    return 'false' if float(literal) == 0 else 'true'


def extract_default_value(expr: Optional[AstNode], param_type: str,
                          path_types=DEFAULT_PATH_TYPES) -> Optional[str]:
    """Render a default argument expression as a TypeScript literal

    Returns None when the expression is not a plain literal.
    """
    node = unwrap_expr(expr)
    if not isinstance(node, dict):
        return None
    kind = node.get('kind')

    if kind == 'CXXBoolLiteralExpr' and isinstance(node.get('value'), bool):
        return 'true' if node['value'] else 'false'

    if kind in ('IntegerLiteral', 'FloatingLiteral'):
        return _as_param_literal(_number_literal(node.get('value')), param_type)

    if kind == 'UnaryOperator' and node.get('opcode') in ('-', '+'):
        operand = unwrap_expr(children(node)[0] if children(node) else None)
        if isinstance(operand, dict) and operand.get('kind') in ('IntegerLiteral', 'FloatingLiteral'):
            literal = _number_literal(operand.get('value'))
            if literal:
                return _as_param_literal(node['opcode'] + literal.lstrip('+-'), param_type)
        return None

    # clang keeps the quotes in the value: "\"abc\""
    if kind == 'StringLiteral' and isinstance(node.get('value'), str):
        return node['value']

    string_node = find_descendant(
        node, lambda n: n.get('kind') == 'StringLiteral' and isinstance(n.get('value'), str))
    if string_node and string_node['value']:
        return string_node['value']

    if is_string_type(param_type) or is_path_type(param_type, path_types):
        # std::string() / SGPath() -> ""
        if kind in ('CXXConstructExpr', 'CXXTemporaryObjectExpr'):
            return '""'

    return None


def extract_param_default_value(param_node: AstNode, param_type: str,
                                path_types=DEFAULT_PATH_TYPES) -> Optional[str]:
    if 'init' not in param_node:
        return None
    exprs = [c for c in children(param_node) if not c.get('kind', '').endswith('Comment')]
    return extract_default_value(exprs[0] if exprs else None, param_type, path_types)


# ==============================================================================
# Methods
# ==============================================================================

def infer_return_type(method_node: AstNode) -> str:
    """Return type from the function type string: 'bool (int) const' -> 'bool'"""
    function_type = method_node.get('type', {}).get('qualType', '')
    angle = 0
    for index, ch in enumerate(function_type):
        if ch == '<':
            angle += 1
        elif ch == '>':
            angle = max(0, angle - 1)
        elif ch == '(' and angle == 0:
            return normalize_type(function_type[:index].strip())
    return ''


def normalize_param_names(params: list[ParamInfo]) -> list[ParamInfo]:
    """Give every parameter a unique identifier (argN for unnamed ones)"""
    used = set()
    for index, param in enumerate(params):
        name = param.name if param.name and _re_identifier.match(param.name) else f'arg{index}'
        if name in used:
            suffix = 1
            while f'{name}_{suffix}' in used:
                suffix += 1
            name = f'{name}_{suffix}'
        used.add(name)
        param.name = name
    return params


def param_nodes(method_node: AstNode) -> list[AstNode]:
    return [c for c in children(method_node) if c.get('kind') == 'ParmVarDecl']


def extract_method_params(method_node: AstNode, path_types=DEFAULT_PATH_TYPES) -> list[ParamInfo]:
    params = []
    for node in param_nodes(method_node):
        name = node.get('name') if isinstance(node.get('name'), str) else ''
        param_type = normalize_type(node.get('type', {}).get('qualType', 'void'))
        params.append(ParamInfo(
            name=name,
            type=param_type,
            default_value=extract_param_default_value(node, param_type, path_types),
        ))
    return normalize_param_names(params)


def find_class_node(ast: Optional[AstNode], class_name: str) -> Optional[AstNode]:
    """Find the complete definition of class_name"""
    if not ast:
        return None
    nodes = find_ast_nodes(ast, lambda n: (n.get('kind') == 'CXXRecordDecl'
                                           and n.get('name') == class_name
                                           and n.get('completeDefinition') is True))
    return nodes[0] if nodes else None


def initial_access(class_node: AstNode) -> str:
    return 'public' if class_node.get('tagUsed') == 'struct' else 'private'


def _is_bindable_method(node: AstNode, class_name: str) -> bool:
    if node.get('kind') != 'CXXMethodDecl' or node.get('isImplicit') is True:
        return False
    name = node.get('name')
    if not isinstance(name, str) or name in (class_name, f'~{class_name}'):
        return False
    return _re_operator.match(name) is None


def extract_public_methods(class_node: AstNode, path_types=DEFAULT_PATH_TYPES) -> list[MethodInfo]:
    """Extract public methods in declaration order"""
    class_name = class_node.get('name', '')
    methods = []
    access = initial_access(class_node)

    for child in children(class_node):
        if child.get('kind') == 'AccessSpecDecl':
            access = child.get('access', access)
            continue

        if access != 'public' or not _is_bindable_method(child, class_name):
            continue

        return_type = infer_return_type(child)
        if not return_type:
            logger.debug('skipping %s: unrecoverable return type', child.get('name'))
            continue

        params = extract_method_params(child, path_types)
        parsed = parse_method_comment(find_full_comment(child))
        doc = MethodDoc(description_lines=parsed.description_lines, returns=parsed.returns)
        # keep only the docs of parameters that exist, keyed by final name and index
        for index, param in enumerate(params):
            text = parsed.param_text(index, param.name)
            if text:
                doc.param_docs_by_name[param.name] = text
                doc.param_docs_by_index[index] = text

        methods.append(MethodInfo(
            name=child['name'],
            return_type=return_type,
            params=params,
            doc=doc,
        ))

    return methods


def class_probe_source(include_path: str) -> str:
    """Translation unit that pulls in the class header"""
    return f'#include "{include_path}"\nint main() {{ return 0; }}\n'


def load_class_node(dumper, include_path: str, class_name: str) -> AstNode:
    """Parse the class header and return the class definition node

    Raises ClassNotFoundError if clang fails or the class is absent.
    """
    ast = dumper.dump_source(class_probe_source(include_path), ast_filter=class_name)
    if ast is None:
        raise ClassNotFoundError(f'Failed to parse {class_name} AST with clang',
                                 {'header': include_path})
    class_node = find_class_node(ast, class_name)
    if class_node is None:
        raise ClassNotFoundError(f'Failed to locate {class_name} class definition in clang AST',
                                 {'header': include_path})
    return class_node
