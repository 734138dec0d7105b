"""
Comment grouping and import consolidation for the dp formatter.

Top-level nodes are grouped with the comments in front of them (and, for
some node kinds, the comment after them on the same line). Imports from
every import list and from function and type bodies are then collected
into one sorted, deduplicated import block.

Author: xwest
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..parser.ast_nodes import Comment, Import, Node, NodeKind, QualifiedName, is_comment
from ..parser.visit import visit_ident_list_child
from .namespace import unquote_import_path, import_path_namespaces, import_path_group

logger = logging.getLogger(__name__)

_SUBSTANCE_KINDS = (NodeKind.CONSTANT_DEF, NodeKind.FUNCTION_DEF, NodeKind.TYPE_DEF)


@dataclass
class CommentedNode:
    """A non-comment node with the comments belonging to it."""
    head: List[Comment] = field(default_factory=list)
    node: Optional[Node] = None     # None for a run of comments only
    tail: List[Comment] = field(default_factory=list)


@dataclass
class CommentedName:
    head: List[Comment]
    name: str                       # Empty for leftover comments
    tail: List[Comment]


@dataclass
class ImportEntry:
    head: List[Comment]
    path: Optional[str]             # None for leftover comments
    names: List[CommentedName]
    tail: Optional[Comment]


@dataclass
class ImportBlock:
    head: List[Comment]
    entries: List[ImportEntry]

    def is_empty(self) -> bool:
        return not self.head and not self.entries


def split_commented_nodes(nodes: Sequence[Node], split_on_gap: bool) -> List[CommentedNode]:
    """
    Group file, import list or identifier list children.

    Comments head the next node. A same-line comment after a constant
    definition or an import is its tail; an identifier also takes the
    comments on the directly following lines.
    """
    groups: List[CommentedNode] = []
    group = CommentedNode()

    i = 0
    while i < len(nodes):
        curr = nodes[i]

        if is_comment(curr):
            group.head.append(curr)
        else:
            group.node = curr

        if i + 1 == len(nodes):
            break

        following = nodes[i + 1]
        step = following.pos.line - curr.end_pos.line

        split = False

        if split_on_gap and step >= 2:
            split = True
        elif group.node is not None:
            if step == 0 and is_comment(following):
                if curr.kind in (NodeKind.CONSTANT_DEF, NodeKind.IMPORT):
                    group.tail = [following]
                    i += 1
                elif curr.kind is NodeKind.IDENTIFIER:
                    while True:
                        group.tail.append(following)
                        i += 1
                        if i + 1 == len(nodes):
                            break

                        curr = following
                        following = nodes[i + 1]
                        if following.pos.line - curr.end_pos.line != 1 or not is_comment(following):
                            break

            split = True

        if split:
            groups.append(group)
            group = CommentedNode()

        i += 1

    if group.head or group.node is not None:
        groups.append(group)

    return groups


def merge_imports(groups: Sequence[CommentedNode]) -> Tuple[int, ImportBlock]:
    """
    Collect all imports of a file.

    Returns the index of the group in front of which the import block is
    printed (-1 when there is nothing to print) and the block itself.
    """
    first_import = -1
    first_imports = -1
    first_substance = -1

    head: List[Comment] = []
    collected: List[CommentedNode] = []

    for i, group in enumerate(groups):
        node = group.node
        if node is None:
            continue

        if node.kind in _SUBSTANCE_KINDS:
            if first_substance < 0:
                first_substance = i

            if node.kind is NodeKind.FUNCTION_DEF:
                collected.extend(CommentedNode(node=n) for n in nested_block_imports(node.body))
            elif node.kind is NodeKind.TYPE_DEF:
                collected.extend(
                    CommentedNode(node=n) for n in node.fields
                    if n.kind is NodeKind.IMPORT and (n.path or n.names)
                )

        elif node.kind is NodeKind.IMPORT:
            if first_import < 0:
                first_import = i
            collected.append(CommentedNode(list(group.head), node, list(group.tail)))

        elif node.kind is NodeKind.IMPORTS:
            if first_imports < 0:
                first_imports = i
            head.extend(group.head)
            collected.extend(split_commented_nodes(node.imports, False))

    entries = trim_imports(resolve_imports(collected))

    index = first_imports if first_imports >= 0 else first_import
    if index < 0 and entries:
        index = first_substance
    if first_substance >= 0 and index > first_substance:
        index = first_substance

    block = ImportBlock(head, entries)
    if block.is_empty():
        index = -1

    logger.debug("merged %d imports into %d entries", len(collected), len(entries))
    return index, block


def nested_block_imports(nodes: Sequence[Node]) -> List[Import]:
    """Find the import statements in a statement list and its sub-blocks."""
    found: List[Import] = []

    for node in nodes:
        if node.kind is NodeKind.IMPORT:
            if node.path or node.names:
                found.append(node)
        elif node.kind is NodeKind.BLOCK:
            found.extend(nested_block_imports(node.body))
        elif node.kind is NodeKind.FOR:
            found.extend(nested_block_imports(node.body))
        elif node.kind is NodeKind.IF:
            found.extend(nested_block_imports(node.then_body))
            found.extend(nested_block_imports(node.else_body))

    return found


def resolve_imports(groups: Sequence[CommentedNode]) -> List[CommentedNode]:
    """Give pathless import names the single path their namespace maps to."""
    namespace_paths: Dict[str, Optional[str]] = {}

    for group in groups:
        if group.node is None or not group.node.path:
            continue

        path, ok = unquote_import_path(group.node.path)
        if not ok:
            continue

        for namespace in import_path_namespaces(path):
            if namespace not in namespace_paths:
                namespace_paths[namespace] = group.node.path
            elif namespace_paths[namespace] not in (None, group.node.path):
                namespace_paths[namespace] = None  # Ambiguous

    resolved: List[CommentedNode] = []

    for group in groups:
        if group.node is None or group.node.path:
            resolved.append(group)
            continue

        path_names: Dict[str, list] = {}
        unresolved = []

        def resolve_name(node):
            path = namespace_paths.get(node.name.namespace())
            if path is not None:
                short = dataclasses.replace(node, name=QualifiedName([node.name.short()]))
                path_names.setdefault(path, []).append(short)
            else:
                unresolved.append(node)

        for node in group.node.names:
            visit_ident_list_child(node, comment=lambda n: None, identifier=resolve_name)

        for path, names in path_names.items():
            logger.debug("resolved %d names to %s", len(names), path)
            resolved.append(CommentedNode(node=Import(
                group.node.position, path, tuple(names), group.node.end,
            )))

        if unresolved:
            resolved.append(CommentedNode(
                list(group.head),
                dataclasses.replace(group.node, names=tuple(unresolved)),
                list(group.tail),
            ))
        elif group.head and path_names:
            resolved[-len(path_names)].head.extend(group.head)

    return resolved


@dataclass
class _MergedImport:
    head: List[Comment]
    path: str
    names: list
    tail: Optional[Comment]


def trim_imports(groups: Sequence[CommentedNode]) -> List[ImportEntry]:
    """Merge imports with the same path and tail comment, then sort them."""
    merged: Dict[Tuple[str, str], _MergedImport] = {}
    extra: List[Comment] = []

    for group in groups:
        if group.node is None:
            extra.extend(group.head)
            continue

        tail = group.tail[0] if group.tail else None
        key = (group.node.path, tail.source.strip() if tail is not None else "")

        existing = merged.get(key)
        if existing is not None:
            existing.head.extend(group.head)
            existing.names.extend(group.node.names)
        else:
            # Copy the name tuple so the input tree stays untouched.
            merged[key] = _MergedImport(list(group.head), group.node.path,
                                        list(group.node.names), tail)

    keys = sorted(merged, key=lambda key: (import_path_group(key[0]), key[0]))

    entries = []
    for key in keys:
        item = merged[key]
        entries.append(ImportEntry(item.head, item.path, trim_import_names(item.names), item.tail))

    if extra:
        entries.append(ImportEntry(extra, None, [], None))

    return entries


def trim_import_names(nodes: Sequence[Node]) -> List[CommentedName]:
    """Merge duplicate names and sort them; stray comments go last."""
    merged: Dict[str, CommentedName] = {}
    extra: List[Comment] = []

    for group in split_commented_nodes(nodes, False):
        if group.node is None:
            extra.extend(group.head)
            continue

        name = str(group.node.name)

        existing = merged.get(name)
        if existing is not None:
            existing.head.extend(group.head)
            existing.tail.extend(group.tail)
        else:
            merged[name] = CommentedName(list(group.head), name, list(group.tail))

    names = [merged[name] for name in sorted(merged)]

    if extra:
        names.append(CommentedName(extra, "", []))

    return names
