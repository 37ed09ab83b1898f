import logging
import os
import threading
from pathlib import Path
from typing import Dict, Union

import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Parser, Tree

logger = logging.getLogger(__name__)

JS_LANGUAGE = Language(tsjavascript.language())
TS_LANGUAGE = Language(tstypescript.language_typescript())
TSX_LANGUAGE = Language(tstypescript.language_tsx())

# The javascript grammar covers JSX
LANGUAGE_BY_EXTENSION: Dict[str, Language] = {
    '.js': JS_LANGUAGE,
    '.jsx': JS_LANGUAGE,
    '.mjs': JS_LANGUAGE,
    '.cjs': JS_LANGUAGE,
    '.ts': TS_LANGUAGE,
    '.tsx': TSX_LANGUAGE,
}

# tree-sitter parsers are stateful; each thread gets its own
_local = threading.local()


def get_parser(file_path: Union[str, Path, None] = None) -> Parser:
    """This thread's parser for the grammar matching the file extension (JSX when unknown)."""
    ext = os.path.splitext(str(file_path or ''))[1].lower()
    if ext not in LANGUAGE_BY_EXTENSION:
        ext = '.jsx'
    parsers: Dict[str, Parser] = getattr(_local, 'parsers', None)
    if parsers is None:
        parsers = _local.parsers = {}
    parser = parsers.get(ext)
    if parser is None:
        parser = parsers[ext] = Parser(LANGUAGE_BY_EXTENSION[ext])
    return parser


def parse_source(code: str, file_path: Union[str, Path, None] = None) -> Tree:
    """Parse JS/JSX/TS/TSX source text into a tree-sitter tree."""
    tree = get_parser(file_path).parse(bytes(code, 'utf-8'))
    if tree.root_node.has_error:
        # tree-sitter recovers; the rest of the file is still analyzable
        logger.warning(f"Syntax errors in {file_path or '<source>'}; analyzing the recovered tree")
    return tree


def node_text(node) -> str:
    return node.text.decode('utf-8')
