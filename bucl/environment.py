"""Variable store for one BUCL invocation.

Every script run and every user-function call owns one `Environment`.
Variables are addressed by `/`-separated paths and every path maps to a
`VarNode`:

* `value` is the direct text value, if one was assigned;
* `count` and `length` are the metadata read back as `path/count` and
  `path/length`;
* `kind` tells how a numeric child `path/N` is read: for a `scalar` it
  is the N-th character of the value, for an `array` it is the stored
  element;
* `fields` lists the named children created by sub-assignment
  (`{db/port} = "3306"`), which drive struct expansion in calls.

Names may embed references (`parts/{i}`); they are resolved before any
lookup or mutation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import BuclError, ErrorVal, EVALUATION_ERROR


SCALAR = 'scalar'
ARRAY = 'array'
NAMED = 'named'

METADATA = ('count', 'length')

MAX_RESOLVE_STEPS = 64

MAX_NAME_LENGTH = 4096


def is_index(text: str) -> bool:
    return text.isascii() and text.isdigit()


def to_count(text: Optional[str]) -> int:
    if text is not None and is_index(text):
        return int(text)
    return 0


def find_reference(text: str, start: int = 0) -> Tuple[int, int]:
    """Locate the next closed `{...}` span at or after `start`.

    Returns `(open, close)` indices of the outer braces, or `(-1, -1)`
    when no opening brace is found. An opening brace without its
    matching close yields `(open, -1)`.
    """
    begin = text.find('{', start)
    if begin < 0:
        return -1, -1
    depth = 0
    for i in range(begin, len(text)):
        ch = text[i]
        if ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return begin, i
    return begin, -1


@dataclass
class VarNode:
    value: Optional[str] = None
    count: Optional[str] = None
    length: Optional[str] = None
    kind: str = NAMED
    fields: Dict[str, None] = field(default_factory=dict)


class Environment:
    """Hierarchical name -> text store with derived metadata."""
    def __init__(self):
        self.nodes: Dict[str, VarNode] = {}

    # ------------------------------------------------------------------
    # Name resolution and interpolation
    # ------------------------------------------------------------------

    def resolve_name(self, name: str) -> str:
        """Substitute embedded `{...}` references in a variable name.

        A name that resolves back to text containing itself, or that grows
        past `MAX_NAME_LENGTH`, is a cyclic reference.
        """
        for _ in range(MAX_RESOLVE_STEPS):
            begin, end = find_reference(name)
            if begin < 0 or end < 0:
                return name
            resolved = self.interpolate(name)
            if name in resolved or len(resolved) > MAX_NAME_LENGTH:
                break
            name = resolved
        raise BuclError(ErrorVal(EVALUATION_ERROR, f"cyclic variable reference in '{name[:80]}'"))

    def interpolate(self, text: str) -> str:
        """Replace every closed `{...}` span of `text` by its value.

        Arrays are joined with single spaces. An unterminated brace and
        everything after it is copied through unchanged.
        """
        parts: List[str] = []
        pos = 0
        while pos < len(text):
            begin, end = find_reference(text, pos)
            if begin < 0 or end < 0:
                break
            parts.append(text[pos:begin])
            parts.append(self.read_for_interpolation(text[begin + 1:end]))
            pos = end + 1
        parts.append(text[pos:])
        return ''.join(parts)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def lookup(self, name: str) -> Optional[VarNode]:
        return self.nodes.get(self.resolve_name(name))

    def read(self, name: str) -> str:
        name = self.resolve_name(name)
        node = self.nodes.get(name)
        if node is not None and node.value is not None:
            return node.value
        parent, _, last = name.rpartition('/')
        if not parent:
            return ''
        owner = self.nodes.get(parent)
        if owner is None:
            return ''
        if last == 'count' and owner.count is not None:
            return owner.count
        if last == 'length' and owner.length is not None:
            return owner.length
        if is_index(last) and owner.kind == SCALAR and owner.value is not None:
            index = int(last)
            if index < len(owner.value):
                return owner.value[index]
        return ''

    def read_for_interpolation(self, name: str) -> str:
        name = self.resolve_name(name)
        if self.is_array(name):
            return ' '.join(self.elements(name))
        return self.read(name)

    def is_array(self, name: str) -> bool:
        node = self.nodes.get(name)
        return node is not None and node.kind == ARRAY

    def elements(self, name: str) -> List[str]:
        node = self.nodes.get(name)
        if node is None:
            return []
        return [self.read(f"{name}/{i}") for i in range(to_count(node.count))]

    def named_fields(self, name: str) -> List[Tuple[str, str]]:
        """Named children of `name` that currently hold a value, sorted by name."""
        node = self.nodes.get(name)
        if node is None:
            return []
        result = []
        for child in sorted(node.fields):
            child_node = self.nodes.get(f"{name}/{child}")
            if child_node is not None and child_node.value is not None:
                result.append((child, child_node.value))
        return result

    def subtree(self, prefix: str) -> List[Tuple[str, str]]:
        """Flatten everything stored below `prefix` into `(relative path, text)` pairs.

        The metadata of `prefix` itself comes first as `count` and
        `length`, followed by every descendant value and its metadata.
        """
        entries: List[Tuple[str, str]] = []
        node = self.nodes.get(prefix)
        if node is not None:
            entries.extend(self._metadata_entries('', node))
        lead = prefix + '/'
        for key, child in list(self.nodes.items()):
            if not key.startswith(lead):
                continue
            relative = key[len(lead):]
            if child.value is not None:
                entries.append((relative, child.value))
            entries.extend(self._metadata_entries(relative + '/', child))
        return entries

    def _metadata_entries(self, lead: str, node: VarNode) -> Iterator[Tuple[str, str]]:
        if node.count is not None:
            yield lead + 'count', node.count
        if node.length is not None:
            yield lead + 'length', node.length

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def assign(self, name: str, values: List[str]) -> None:
        """Store one or more values under `name`.

        A single value makes a scalar and no value an empty scalar with
        `count` 0. Several values make an array: the direct value is their
        plain concatenation and `name/0..N-1` hold the individual values.
        Assigning to `name/count` or `name/length` overrides that metadata
        of `name`.
        """
        name = self.resolve_name(name)
        if self._set_metadata(name, ''.join(values)):
            return
        self._drop_elements(name)
        node = self._store(name, ''.join(values))
        if not values:
            node.count = '0'
        if len(values) > 1:
            node.count = str(len(values))
            node.kind = ARRAY
            for i, value in enumerate(values):
                self._store(f"{name}/{i}", value)
        self._register_field(name)

    def write(self, name: str, value: str) -> None:
        """Low-level single-value write that leaves existing children alone."""
        name = self.resolve_name(name)
        if self._set_metadata(name, value):
            return
        self._store(name, value)
        self._register_field(name)

    def put(self, name: str, value: str) -> None:
        """Store an interpreter-managed slot such as a loop's `index`.

        Unlike `write`, the slot is not registered as a named child of
        its parent, so it never takes part in struct expansion.
        """
        self._store(name, value)

    def install_arguments(self, name: str, values: List[str]) -> None:
        """Store `values` as an argument list: every element is kept, even a single one."""
        self._drop_elements(name)
        node = self._store(name, ''.join(values))
        node.count = str(len(values))
        node.kind = ARRAY if len(values) > 1 else SCALAR
        for i, value in enumerate(values):
            self._store(f"{name}/{i}", value)

    def set_counter(self, name: str, total: int) -> None:
        """Store a loop counter: the value and `count` are both `total`."""
        name = self.resolve_name(name)
        self._drop_elements(name)
        node = self._store(name, str(total))
        node.count = str(total)
        self._register_field(name)

    def _store(self, name: str, value: str) -> VarNode:
        node = self.nodes.get(name)
        if node is None:
            node = self.nodes[name] = VarNode()
        node.value = value
        node.length = str(len(value))
        node.count = '1'
        node.kind = SCALAR
        return node

    def _set_metadata(self, name: str, value: str) -> bool:
        parent, _, last = name.rpartition('/')
        if not parent or last not in METADATA:
            return False
        node = self.nodes.get(parent)
        if node is None:
            node = self.nodes[parent] = VarNode()
        if last == 'length':
            node.length = value
            return True
        node.count = value
        if to_count(value) > 1:
            node.kind = ARRAY
        elif node.value is not None:
            node.kind = SCALAR
        return True

    def _register_field(self, name: str) -> None:
        parent, _, last = name.rpartition('/')
        if not parent or is_index(last):
            return
        node = self.nodes.get(parent)
        if node is None:
            node = self.nodes[parent] = VarNode()
        node.fields[last] = None

    def _drop_elements(self, name: str) -> None:
        node = self.nodes.get(name)
        if node is None or node.kind != ARRAY:
            return
        for i in range(to_count(node.count)):
            element = f"{name}/{i}"
            self.nodes.pop(element, None)
            lead = element + '/'
            for key in [k for k in self.nodes if k.startswith(lead)]:
                del self.nodes[key]
