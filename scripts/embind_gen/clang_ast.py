"""
Clang AST acquisition

Runs the clang front end with -ast-dump=json and turns its output into a
single JSON tree. Nodes are kept as the plain dicts clang emits: every node
has a 'kind' and an optional ordered 'inner' child list.
"""

import json
import logging
import os
import shutil
import subprocess
import tempfile
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)

AstNode = dict

DEFAULT_COMPILERS = ['clang++', 'clang']
DEFAULT_MAX_OUTPUT = 128 * 1024 * 1024

# Synthetic root wrapping several top-level documents
DOCUMENT_SET_KIND = 'ClangAstDocumentSet'


def _split_json_documents(text: str) -> Optional[list[AstNode]]:
    """Split concatenated top-level JSON objects

    clang prints one document per declaration matched by -ast-dump-filter.
    Returns None if any chunk fails to parse.
    """
    docs = []
    start = -1
    depth = 0
    in_string = False
    escaped = False

    for index, ch in enumerate(text):
        if start == -1:
            if ch == '{':
                start = index
                depth = 1
                in_string = False
                escaped = False
            continue

        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                try:
                    docs.append(json.loads(text[start:index + 1]))
                except json.JSONDecodeError:
                    return None
                start = -1

    return docs


def parse_clang_json_output(output: str) -> Optional[AstNode]:
    """Parse clang JSON AST output into one logical document"""
    trimmed = output.strip()
    if not trimmed:
        return None

    try:
        return json.loads(trimmed)
    except json.JSONDecodeError:
        pass

    docs = _split_json_documents(trimmed)
    if not docs:
        return None
    if len(docs) == 1:
        return docs[0]
    return {'kind': DOCUMENT_SET_KIND, 'inner': docs}


def children(node: AstNode) -> list[AstNode]:
    """Return the child list of a node (empty for leaves)"""
    inner = node.get('inner') if isinstance(node, dict) else None
    return inner if isinstance(inner, list) else []


def iter_ast(node: AstNode) -> Iterator[AstNode]:
    """Yield nodes depth-first, each node before its children"""
    if not isinstance(node, dict):
        return
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed([c for c in children(current) if isinstance(c, dict)]))


def walk_ast(node: AstNode, visit: Callable[[AstNode], None]):
    """Call visit on every node in pre-order"""
    for current in iter_ast(node):
        visit(current)


def find_ast_nodes(root: AstNode, predicate: Callable[[AstNode], bool]) -> list[AstNode]:
    """Collect all nodes matching predicate, in pre-order"""
    return [node for node in iter_ast(root) if predicate(node)]


def find_descendant(root: AstNode, predicate: Callable[[AstNode], bool]) -> Optional[AstNode]:
    """Return the first node (pre-order, root included) matching predicate"""
    for node in iter_ast(root):
        if predicate(node):
            return node
    return None


class ClangAstDumper:
    """Invokes the clang front end and parses its JSON AST dump"""

    def __init__(self, include_dir: str, compilers: Optional[list[str]] = None,
                 std: str = 'c++17', max_output: int = DEFAULT_MAX_OUTPUT,
                 tmp_prefix: str = 'bindgen-'):
        self.include_dir = include_dir
        self.compilers = list(compilers) if compilers else list(DEFAULT_COMPILERS)
        self.std = std
        self.max_output = max_output
        self.tmp_prefix = tmp_prefix

    def _command(self, compiler: str, source_path: str, ast_filter: Optional[str]) -> list[str]:
        cmd = [compiler, f'-std={self.std}', '-I', self.include_dir, '-fsyntax-only']
        if ast_filter:
            cmd.extend(['-Xclang', f'-ast-dump-filter={ast_filter}'])
        cmd.extend(['-Xclang', '-ast-dump=json', source_path])
        return cmd

    def dump_file(self, source_path: str, ast_filter: Optional[str] = None) -> Optional[AstNode]:
        """Dump the AST of a source file

        Each compiler candidate is tried in order; the first one producing
        parsable output wins. Returns None when no candidate works.
        """
        for compiler in self.compilers:
            cmd = self._command(compiler, source_path, ast_filter)
            try:
                result = subprocess.run(cmd, capture_output=True, text=True,
                                        encoding='utf-8', errors='replace')
            except OSError as e:
                logger.debug('compiler %s unavailable: %s', compiler, e)
                continue

            if result.returncode != 0:
                logger.debug('%s exited with %d for %s', compiler, result.returncode, source_path)
                continue

            if len(result.stdout) > self.max_output:
                logger.debug('%s output exceeds %d bytes for %s', compiler, self.max_output, source_path)
                continue

            ast = parse_clang_json_output(result.stdout)
            if ast is None:
                logger.debug('unparsable AST output from %s for %s', compiler, source_path)
                continue

            return ast

        logger.debug('no compiler produced an AST for %s', source_path)
        return None

    def dump_source(self, source: str, ast_filter: Optional[str] = None) -> Optional[AstNode]:
        """Dump the AST of a synthesized translation unit"""
        temp_dir = tempfile.mkdtemp(prefix=self.tmp_prefix)
        try:
            source_path = os.path.join(temp_dir, 'probe.cpp')
            with open(source_path, 'w', encoding='utf-8') as f:
                f.write(source)
            return self.dump_file(source_path, ast_filter)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)
