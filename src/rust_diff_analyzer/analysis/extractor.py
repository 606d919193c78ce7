"""Semantic unit extraction from Rust source.

Grammar recognition is delegated to tree-sitter (``tree-sitter-rust``);
this module only walks the resulting tree. A tree containing any ERROR or
MISSING node is rejected with ParseError rather than partially extracted.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

import tree_sitter_rust
from tree_sitter import Language, Node, Parser

from rust_diff_analyzer.analysis.classifier import classify, is_build_script, module_path_for
from rust_diff_analyzer.analysis.models import (
    Attribute,
    CfgPredicate,
    LineSpan,
    SemanticUnit,
    SemanticUnitKind,
    Visibility,
)
from rust_diff_analyzer.config.schema import ClassificationConfig

logger = logging.getLogger(__name__)

RUST_LANGUAGE = Language(tree_sitter_rust.language())

_UNIT_KINDS = {
    "function_item": SemanticUnitKind.FUNCTION,
    "function_signature_item": SemanticUnitKind.FUNCTION,
    "struct_item": SemanticUnitKind.TYPE_DEFINITION,
    "enum_item": SemanticUnitKind.TYPE_DEFINITION,
    "union_item": SemanticUnitKind.TYPE_DEFINITION,
    "type_item": SemanticUnitKind.TYPE_DEFINITION,
    "trait_item": SemanticUnitKind.INTERFACE_DECLARATION,
    "impl_item": SemanticUnitKind.IMPLEMENTATION_BLOCK,
    "mod_item": SemanticUnitKind.MODULE,
}

# Self types that give an impl block a name; anything else is anonymous
_NAMED_TYPES = ("type_identifier", "generic_type", "scoped_type_identifier", "primitive_type")

# Subtrees that never contain items
_OPAQUE = ("attribute_item", "inner_attribute_item", "token_tree", "line_comment", "block_comment")

_BRACKETS = ("(", ")", "[", "]", "{", "}")
_WHITESPACE_RE = re.compile(r"\s+")


class ParseError(Exception):
    """Raised when source text does not form a valid syntax tree."""

    def __init__(
        self,
        path: str,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.path = path
        self.message = message
        self.line = line
        self.column = column
        where = f" at {line}:{column}" if line is not None else ""
        super().__init__(f"failed to parse '{path}'{where}: {message}")


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _first_error(node: Node) -> Optional[Node]:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _is_outer_doc_comment(node: Node) -> bool:
    text = _text(node)
    if node.type == "line_comment":
        return text.startswith("///") and not text.startswith("////")
    if node.type == "block_comment":
        return text.startswith("/**") and not text.startswith("/***") and text != "/**/"
    return False


# ---- attributes ----


def _split_arguments(token_tree: Node) -> List[List[Node]]:
    """Split a token tree's contents on top-level commas."""
    groups: List[List[Node]] = []
    current: List[Node] = []
    for child in token_tree.children:
        if child.type in _BRACKETS:
            continue
        if not child.is_named and "," in _text(child):
            if current:
                groups.append(current)
            current = []
            continue
        current.append(child)
    if current:
        groups.append(current)
    return groups


def _cfg_predicate(tokens: Sequence[Node]) -> CfgPredicate:
    if not tokens:
        return CfgPredicate(op="unknown")
    name = _text(tokens[0])
    if len(tokens) == 1:
        return CfgPredicate(op="option", name=name)
    if name in ("all", "any", "not") and tokens[1].type == "token_tree":
        args = tuple(_cfg_predicate(group) for group in _split_arguments(tokens[1]))
        return CfgPredicate(op=name, args=args)
    if _text(tokens[1]) == "=" and len(tokens) >= 3:
        return CfgPredicate(op="option", name=name, value=_text(tokens[2]).strip('"'))
    return CfgPredicate(op="unknown", name=name)


def _parse_attribute(item: Node) -> Optional[Attribute]:
    """Turn an ``attribute_item``/``inner_attribute_item`` into an Attribute."""
    attr = next((c for c in item.named_children if c.type == "attribute"), None)
    if attr is None or not attr.named_children:
        return None
    path = _WHITESPACE_RE.sub("", _text(attr.named_children[0]))
    cfg: Optional[CfgPredicate] = None
    arguments = attr.child_by_field_name("arguments")
    if path.rsplit("::", 1)[-1] == "cfg" and arguments is not None:
        groups = _split_arguments(arguments)
        cfg = _cfg_predicate(groups[0]) if len(groups) == 1 else CfgPredicate(op="unknown")
    return Attribute(path=path, cfg=cfg)


def _outer_attributes(node: Node) -> Tuple[Tuple[Attribute, ...], int]:
    """Attributes directly preceding *node*, and the row its span starts on.

    Outer doc comments extend the span; ordinary comments are skipped over.
    """
    attrs: List[Attribute] = []
    start_row = node.start_point[0]
    sibling = node.prev_sibling
    while sibling is not None and sibling.type in ("attribute_item", "line_comment", "block_comment"):
        if sibling.type == "attribute_item":
            parsed = _parse_attribute(sibling)
            if parsed is not None:
                attrs.insert(0, parsed)
            start_row = sibling.start_point[0]
        elif _is_outer_doc_comment(sibling):
            start_row = sibling.start_point[0]
        sibling = sibling.prev_sibling
    return tuple(attrs), start_row


def _inner_attributes(body: Optional[Node]) -> Tuple[Attribute, ...]:
    if body is None:
        return ()
    attrs = []
    for child in body.named_children:
        if child.type == "inner_attribute_item":
            parsed = _parse_attribute(child)
            if parsed is not None:
                attrs.append(parsed)
    return tuple(attrs)


# ---- names and visibility ----


def _visibility(node: Node) -> Visibility:
    modifier = next((c for c in node.named_children if c.type == "visibility_modifier"), None)
    if modifier is None:
        return Visibility.PRIVATE
    text = _WHITESPACE_RE.sub("", _text(modifier))
    if text == "pub":
        return Visibility.PUBLIC
    if text.startswith("pub(") or text == "crate":
        return Visibility.MODULE_SCOPED
    return Visibility.PUBLIC


def _unit_name(node: Node) -> str:
    if node.type != "impl_item":
        return _text(node.child_by_field_name("name"))
    self_type = node.child_by_field_name("type")
    if self_type is None or self_type.type not in _NAMED_TYPES:
        return ""
    name = _WHITESPACE_RE.sub(" ", _text(self_type))
    trait = node.child_by_field_name("trait")
    if trait is not None:
        negated = any(c.type == "!" for c in node.children)
        name = f"{'!' if negated else ''}{_WHITESPACE_RE.sub(' ', _text(trait))} for {name}"
    return name


# ---- tree walk ----


class _UnitWalker:
    """Depth-first collector of semantic units."""

    def __init__(self, file_path: str, config: ClassificationConfig) -> None:
        self.file_path = file_path
        self.config = config
        self.build_script = is_build_script(file_path, config)
        self.units: List[SemanticUnit] = []

    def walk(
        self,
        node: Node,
        enclosing: Tuple[Attribute, ...],
        module_path: Tuple[str, ...],
        top_level: bool,
    ) -> None:
        for child in node.named_children:
            if child.type in _OPAQUE:
                continue
            kind = _UNIT_KINDS.get(child.type)
            if kind is None:
                # Blocks, expressions, statements: keep looking for nested items
                self.walk(child, enclosing, module_path, top_level=False)
                continue
            self._visit_unit(child, kind, enclosing, module_path, top_level)

    def _visit_unit(
        self,
        node: Node,
        kind: SemanticUnitKind,
        enclosing: Tuple[Attribute, ...],
        module_path: Tuple[str, ...],
        top_level: bool,
    ) -> None:
        attrs, start_row = _outer_attributes(node)
        name = _unit_name(node)
        if kind is SemanticUnitKind.FUNCTION and self.build_script and top_level and name == "main":
            kind = SemanticUnitKind.BUILD_SCRIPT_ENTRY

        end_row = node.end_point[0]
        if node.end_point[1] == 0 and end_row > start_row:
            end_row -= 1  # node ends at the start of the following line

        code_type = classify(attrs, enclosing, module_path, self.file_path, self.config)
        self.units.append(
            SemanticUnit(
                kind=kind,
                name=name,
                visibility=_visibility(node),
                span=LineSpan(start_row + 1, end_row + 1),
                code_type=code_type,
            )
        )

        body = node.child_by_field_name("body")
        inner = _inner_attributes(body) if node.type == "mod_item" else ()
        child_path = module_path + (name,) if node.type == "mod_item" else module_path
        if body is not None:
            self.walk(body, enclosing + attrs + inner, child_path, top_level=False)


def extract_semantic_units(
    source: str,
    file_path: str,
    config: Optional[ClassificationConfig] = None,
) -> List[SemanticUnit]:
    """Return the semantic units of *source*, ordered by span start.

    Raises ParseError when the source does not form a valid syntax tree.
    """
    config = config or ClassificationConfig()
    tree = Parser(RUST_LANGUAGE).parse(source.encode("utf-8"))
    root = tree.root_node

    if root.has_error:
        bad = _first_error(root) or root
        row, column = bad.start_point
        what = f"missing '{bad.type}'" if bad.is_missing else "unexpected syntax"
        raise ParseError(file_path, what, line=row + 1, column=column + 1)

    walker = _UnitWalker(file_path, config)
    walker.walk(root, _inner_attributes(root), module_path_for(file_path), top_level=True)
    units = sorted(walker.units, key=lambda u: u.span.start)
    logger.debug("Extracted %d units from %s", len(units), file_path)
    return units
