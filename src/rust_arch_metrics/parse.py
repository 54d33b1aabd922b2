"""Tree-sitter parsing of Rust source, with structured parse failures."""

import logging
from pathlib import Path

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_language

log = logging.getLogger(__name__)

_PARSERS: dict[str, Parser] = {}


class ParseError(Exception):
    """A source unit that did not produce a usable syntax tree."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


def _get_parser(language: str = "rust") -> Parser:
    if language not in _PARSERS:
        lang_obj = get_language(language)
        parser = Parser(lang_obj)
        _PARSERS[language] = parser
    return _PARSERS[language]


def walk_tree(node: Node):
    """Depth-first generator over all nodes in a tree."""
    yield node
    for child in node.children:
        yield from walk_tree(child)


def _first_error(root: Node) -> Node | None:
    for node in walk_tree(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return None


def _describe_error(node: Node | None) -> str:
    if node is None:
        return "syntax error"
    line, col = node.start_point[0] + 1, node.start_point[1] + 1
    if node.is_missing:
        return f"missing `{node.type}` at {line}:{col}"
    snippet = node.text.decode("utf-8", errors="replace") if node.text else ""
    snippet = " ".join(snippet.split())
    if len(snippet) > 40:
        snippet = snippet[:37] + "..."
    return f"unexpected `{snippet}` at {line}:{col}"


def parse_source(source: bytes, path: str = "<memory>") -> Tree:
    """
    Parse Rust source bytes. Raises ParseError if the tree contains any
    error or missing node, so callers never see a partially-recovered tree.
    """
    tree = _get_parser().parse(source)
    if tree.root_node.has_error:
        raise ParseError(path, _describe_error(_first_error(tree.root_node)))
    return tree


def parse_file(path: str | Path) -> tuple[Tree, bytes]:
    """Read and parse a Rust file, returning (Tree, source_bytes)."""
    full_path = Path(path)
    try:
        source = full_path.read_bytes()
    except OSError as e:
        raise ParseError(str(path), f"cannot read file: {e.strerror or e}") from e

    log.debug("Parsing %s (%d bytes)", full_path, len(source))
    return parse_source(source, str(path)), source
