from typing import Dict, List, Tuple, Optional, Iterable
from dataclasses import dataclass
from enum import Enum
import hashlib
import json


# Pattern field that matches any symbol, and write field that keeps the symbol
WILDCARD = None
SAME = None


class Move(Enum):
    """Head movement of a single tape."""
    L = 'L'
    R = 'R'
    S = 'S'

    @property
    def offset(self) -> int:
        if self is Move.L:
            return -1
        if self is Move.R:
            return 1
        return 0


@dataclass(frozen=True)
class Transition:
    """
    A single rule of the transition table.

    tapecondition holds one entry per tape: a concrete symbol, or WILDCARD (None)
    for "matches anything, blank included". write holds a concrete symbol or SAME
    (None) for "leave the cell as it is".
    """
    from_state: str
    to_state: str
    tapecondition: Tuple[Optional[str], ...]
    write: Tuple[Optional[str], ...]
    direction: Tuple[Move, ...]

    def to_dict(self) -> Dict:
        return {
            'from': self.from_state,
            'to': self.to_state,
            'read': ['all' if field is WILDCARD else field for field in self.tapecondition],
            'write': ['same' if field is SAME else field for field in self.write],
            'move': [move.value for move in self.direction]
        }


class TapeWindow:
    """
    The visited cells of one tape.

    right[i] is absolute position i, left[i] is absolute position -i - 1. Cells
    outside the window are blank and are not stored.
    """

    __slots__ = ('left', 'right')

    def __init__(self, left: Iterable[str] = (), right: Iterable[str] = ()):
        self.left = tuple(left)
        self.right = tuple(right)

    @classmethod
    def from_string(cls, content: str) -> 'TapeWindow':
        """Window whose right side holds the characters of content."""
        return cls((), tuple(content))

    def read(self, position: int, blank: str) -> str:
        """Symbol at an absolute position, blank if it was never visited."""
        if position < 0:
            index = -position - 1
            return self.left[index] if index < len(self.left) else blank
        return self.right[position] if position < len(self.right) else blank

    def contains(self, position: int) -> bool:
        if position < 0:
            return -position - 1 < len(self.left)
        return position < len(self.right)

    def bounds(self) -> Tuple[int, int]:
        """Lowest and highest materialized absolute positions."""
        return -len(self.left), len(self.right) - 1

    def __len__(self):
        return len(self.left) + len(self.right)

    def __eq__(self, other):
        return isinstance(other, TapeWindow) and self.left == other.left and self.right == other.right

    def __hash__(self):
        return hash((self.left, self.right))

    def __repr__(self):
        return f"TapeWindow(left={list(self.left)}, right={list(self.right)})"

    def to_list(self) -> List[List[str]]:
        return [list(self.left), list(self.right)]


class Configuration:
    """
    Immutable snapshot of a machine: state, one window per tape and one head per tape.

    Equality and hashing go through the SHA-256 content key, so two independently
    built configurations with the same content are the same graph node.
    """

    __slots__ = ('state', 'tapes', 'heads', '_key')

    def __init__(self, state: str, tapes: Iterable[TapeWindow], heads: Iterable[int]):
        self.state = state
        self.tapes = tuple(tapes)
        self.heads = tuple(heads)
        self._key = None

    @property
    def key(self) -> str:
        if self._key is None:
            self._key = hash_configuration(self)
        return self._key

    @property
    def tape_count(self) -> int:
        return len(self.tapes)

    def symbol_under_head(self, tape_index: int, blank: str) -> str:
        return self.tapes[tape_index].read(self.heads[tape_index], blank)

    def to_dict(self) -> Dict:
        return {
            'state': self.state,
            'tapes': [tape.to_list() for tape in self.tapes],
            'heads': list(self.heads)
        }

    def __eq__(self, other):
        return isinstance(other, Configuration) and self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        return f"Configuration(state={self.state!r}, heads={list(self.heads)}, tapes={list(self.tapes)})"


def hash_configuration(config: Configuration) -> str:
    """
    Canonical content key of a configuration.

    The configuration is serialized as compact JSON with a fixed field order and
    hashed with SHA-256. The key is only meant for identity inside one process.

    Args:
        config: The configuration to hash

    Returns:
        Hex digest identifying the configuration
    """
    serialized = json.dumps(
        [config.state, [tape.to_list() for tape in config.tapes], list(config.heads)],
        separators=(',', ':'),
        ensure_ascii=False
    )
    return hashlib.sha256(serialized.encode('utf-8')).hexdigest()


@dataclass
class TuringMachine:
    """Everything the core needs from a machine description."""
    transitions: Dict[str, List[Transition]]
    start_state: str
    blank: str
    tape_count: int
    input: Tuple[TapeWindow, ...]

    def start_configuration(self) -> Configuration:
        # Imported here, tm_configurations depends on this module
        from .tm_configurations import start_configuration
        return start_configuration(self.start_state, self.input, self.tape_count, self.blank)


def format_tape(tape: TapeWindow, head: int, blank: str, blank_display: str = '□') -> str:
    """
    Render a tape window on one line with the head cell in brackets.

    Args:
        tape: The tape window
        head: Absolute head position
        blank: The machine's blank symbol
        blank_display: What to print for blank cells

    Returns:
        The rendered tape, e.g. "1 0 [1] □"
    """
    low, high = tape.bounds()
    low = min(low, head)
    high = max(high, head)

    cells = []
    for position in range(low, high + 1):
        symbol = tape.read(position, blank)
        if symbol == blank:
            symbol = blank_display
        cells.append(f"[{symbol}]" if position == head else symbol)
    return ' '.join(cells)


def describe_configuration(config: Configuration, blank: str) -> str:
    """Multi-line, human readable dump of a configuration."""
    lines = [f"State: {config.state}"]
    for index, (tape, head) in enumerate(zip(config.tapes, config.heads)):
        lines.append(f"  Tape {index + 1}: {format_tape(tape, head, blank)}")
    return '\n'.join(lines)
