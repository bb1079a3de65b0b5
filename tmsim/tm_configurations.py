from typing import List, Tuple, Optional, Sequence, Iterable
import logging

from .tm_model import Configuration, TapeWindow, Transition, WILDCARD, SAME

logger = logging.getLogger(__name__)


def start_configuration(start_state: str, input_tapes: Iterable[TapeWindow], tape_count: int,
                        blank: str) -> Configuration:
    """
    Builds the start configuration of a machine.

    All heads start at position 0. A tape with an empty right side gets one blank
    cell so that the cell under every head is materialized.

    Args:
        start_state: The start state of the machine
        input_tapes: One window per tape holding the input
        tape_count: Number of tapes
        blank: The blank symbol

    Returns:
        The start configuration
    """
    tapes = list(input_tapes)
    if len(tapes) > tape_count:
        raise ValueError(f"Got {len(tapes)} input tapes for a machine with {tape_count} tapes")

    # Missing input tapes are empty
    while len(tapes) < tape_count:
        tapes.append(TapeWindow())

    windows = []
    for tape in tapes:
        if not tape.right:
            tape = TapeWindow(tape.left, (blank,))
        windows.append(tape)

    return Configuration(start_state, windows, [0] * tape_count)


def match_transitions(config: Configuration, transitions: Sequence[Transition],
                      blank: str) -> List[Tuple[Transition, int]]:
    """
    Finds every transition that can fire in the given configuration.

    A transition matches if, for every tape, its pattern is a wildcard or equals the
    symbol under that tape's head. All matches are valid at the same time, the list
    order only provides the transition index.

    Args:
        config: The configuration to match against
        transitions: The transitions of config's state
        blank: The blank symbol, read for cells outside the window

    Returns:
        List of (transition, index) pairs in list order
    """
    matches = []

    for index, transition in enumerate(transitions):
        valid = True

        for tape_index, pattern in enumerate(transition.tapecondition):
            if pattern is WILDCARD:
                continue
            if config.symbol_under_head(tape_index, blank) != pattern:
                valid = False
                break

        if valid:
            matches.append((transition, index))

    return matches


def _write_cell(left: List[str], right: List[str], position: int, symbol: str, blank: str):
    """Write symbol at an absolute position of a mutable window copy."""
    if position < 0:
        side, index = left, -position - 1
    else:
        side, index = right, position

    while len(side) <= index:
        side.append(blank)
    side[index] = symbol


def apply_transition(config: Configuration, transition: Transition, blank: str) -> Configuration:
    """
    Applies a transition that is known to match the configuration.

    Writes happen at the old head positions, then the heads move. A head that moves
    off the window extends it by exactly one blank cell on that side.

    Args:
        config: The configuration the transition fires in
        transition: A transition returned by match_transitions for config
        blank: The blank symbol

    Returns:
        A new configuration sharing no mutable state with config
    """
    new_tapes = []
    new_heads = []

    for tape_index, tape in enumerate(config.tapes):
        left = list(tape.left)
        right = list(tape.right)
        head = config.heads[tape_index]

        symbol = transition.write[tape_index]
        if symbol is not SAME:
            _write_cell(left, right, head, symbol, blank)

        head += transition.direction[tape_index].offset

        # Materialize the newly visited cell
        if head >= 0 and head >= len(right):
            right.append(blank)
        elif head < 0 and -head > len(left):
            left.append(blank)

        new_tapes.append(TapeWindow(left, right))
        new_heads.append(head)

    return Configuration(transition.to_state, new_tapes, new_heads)


def next_configurations(config: Configuration, transitions: Optional[Sequence[Transition]],
                        tape_count: int, blank: str) -> List[Tuple[Configuration, int]]:
    """
    Computes all direct successors of a configuration.

    Args:
        config: The current configuration
        transitions: The transitions of config's state. None means the state is
            missing from the transition table, which should never happen for a
            reachable state
        tape_count: Number of tapes of the machine
        blank: The blank symbol

    Returns:
        List of (next_configuration, transition_index), one per matching transition
    """
    if transitions is None:
        logger.error("No transitions known for state '%s'; treating it as a dead end", config.state)
        return []

    if config.tape_count != tape_count:
        logger.error("Configuration has %d tapes, machine has %d", config.tape_count, tape_count)
        return []

    return [
        (apply_transition(config, transition, blank), index)
        for transition, index in match_transitions(config, transitions, blank)
    ]
