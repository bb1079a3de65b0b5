from typing import Dict, List

from .tm_model import Configuration, Move, TapeWindow, Transition, TuringMachine, WILDCARD, SAME


class MachineDescriptionError(ValueError):
    """The machine description dictionary is malformed."""


def validate_tm_structure(description: Dict) -> Dict:
    """
    Validates that a machine description has the structure machine_from_dict expects.

    Args:
        description: The machine description dictionary with the keys
            - tapes: Number of tapes
            - blank: The blank symbol (one character)
            - startState: The start state
            - input: One entry per tape, a string or a [left, right] pair of symbol lists
            - transitions: Dictionary mapping each state to a list of transitions,
              each {'read': [...], 'write': [...], 'move': [...], 'to': state}

    Returns:
        Dict: Validation result with 'valid' boolean and optional 'error' message
    """
    if not isinstance(description, dict):
        return {'valid': False, 'error': 'Machine description must be a dictionary'}

    required_keys = ['tapes', 'blank', 'startState', 'transitions']

    for key in required_keys:
        if key not in description:
            return {'valid': False, 'error': f'Missing required key: {key}'}

    tape_count = description['tapes']
    if not isinstance(tape_count, int) or isinstance(tape_count, bool) or tape_count < 1:
        return {'valid': False, 'error': 'tapes must be a positive integer'}

    blank = description['blank']
    if not isinstance(blank, str) or len(blank) != 1:
        return {'valid': False, 'error': 'blank must be a single character'}

    if not isinstance(description['startState'], str) or not description['startState']:
        return {'valid': False, 'error': 'startState must be a non-empty string'}

    transitions = description['transitions']
    if not isinstance(transitions, dict):
        return {'valid': False, 'error': 'transitions must be a dictionary'}

    if description['startState'] not in transitions:
        return {'valid': False, 'error': 'Start state has no entry in transitions'}

    input_tapes = description.get('input', [])
    if not isinstance(input_tapes, list):
        return {'valid': False, 'error': 'input must be a list'}
    if len(input_tapes) > tape_count:
        return {'valid': False, 'error': f'input has {len(input_tapes)} tapes, machine has {tape_count}'}
    for tape in input_tapes:
        if isinstance(tape, str):
            continue
        if (not isinstance(tape, list) or len(tape) != 2
                or not all(isinstance(side, list) for side in tape)):
            return {'valid': False, 'error': 'Each input tape must be a string or a [left, right] pair'}
        if not all(_is_symbol(symbol) for side in tape for symbol in side):
            return {'valid': False, 'error': 'Tape symbols must be single characters'}

    for state, transition_list in transitions.items():
        if not isinstance(transition_list, list):
            return {'valid': False, 'error': f'Transitions of state {state} must be a list'}

        for position, entry in enumerate(transition_list):
            error = _validate_transition(entry, tape_count)
            if error:
                return {'valid': False, 'error': f'Transition {position} of state {state}: {error}'}

    return {'valid': True}


def _is_symbol(value) -> bool:
    return isinstance(value, str) and len(value) == 1


def _validate_transition(entry, tape_count: int):
    """Returns an error message, or None if the transition is well formed."""
    if not isinstance(entry, dict):
        return 'must be a dictionary'

    for key in ('read', 'write', 'move'):
        if key not in entry:
            return f'missing {key}'
        if not isinstance(entry[key], list) or len(entry[key]) != tape_count:
            return f'{key} must be a list with one entry per tape'

    for field in entry['read']:
        if field != 'all' and not _is_symbol(field):
            return "read entries must be a symbol or 'all'"

    for field in entry['write']:
        if field != 'same' and not _is_symbol(field):
            return "write entries must be a symbol or 'same'"

    valid_moves = {move.value for move in Move}
    for move in entry['move']:
        if move not in valid_moves:
            return f"move entries must be one of {sorted(valid_moves)}"

    if 'to' in entry and (not isinstance(entry['to'], str) or not entry['to']):
        return 'to must be a non-empty string'

    return None


def transition_from_dict(state: str, entry: Dict) -> Transition:
    return Transition(
        from_state=state,
        to_state=entry.get('to', state),
        tapecondition=tuple(WILDCARD if field == 'all' else field for field in entry['read']),
        write=tuple(SAME if field == 'same' else field for field in entry['write']),
        direction=tuple(Move(move) for move in entry['move'])
    )


def tape_from_value(value) -> TapeWindow:
    if isinstance(value, str):
        return TapeWindow.from_string(value)
    left, right = value
    return TapeWindow(left, right)


def machine_from_dict(description: Dict) -> TuringMachine:
    """
    Builds a TuringMachine from a machine description dictionary.

    Raises:
        MachineDescriptionError: If the description does not validate
    """
    validation = validate_tm_structure(description)
    if not validation['valid']:
        raise MachineDescriptionError(validation['error'])

    transitions: Dict[str, List[Transition]] = {
        state: [transition_from_dict(state, entry) for entry in transition_list]
        for state, transition_list in description['transitions'].items()
    }

    return TuringMachine(
        transitions=transitions,
        start_state=description['startState'],
        blank=description['blank'],
        tape_count=description['tapes'],
        input=tuple(tape_from_value(tape) for tape in description.get('input', []))
    )


def configuration_from_dict(data: Dict, tape_count: int) -> Configuration:
    """
    Builds a configuration from its to_dict() form.

    Raises:
        MachineDescriptionError: If the dictionary does not describe a configuration
            of a machine with tape_count tapes
    """
    if not isinstance(data, dict):
        raise MachineDescriptionError('Configuration must be a dictionary')

    for key in ('state', 'tapes', 'heads'):
        if key not in data:
            raise MachineDescriptionError(f'Configuration is missing {key}')

    if not isinstance(data['state'], str) or not data['state']:
        raise MachineDescriptionError('Configuration state must be a non-empty string')

    tapes, heads = data['tapes'], data['heads']
    if not isinstance(tapes, list) or len(tapes) != tape_count:
        raise MachineDescriptionError(f'Configuration must have {tape_count} tapes')
    if not isinstance(heads, list) or len(heads) != tape_count:
        raise MachineDescriptionError(f'Configuration must have {tape_count} heads')
    if not all(isinstance(head, int) and not isinstance(head, bool) for head in heads):
        raise MachineDescriptionError('Heads must be integers')

    windows = []
    for tape in tapes:
        if (not isinstance(tape, list) or len(tape) != 2
                or not all(isinstance(side, list) for side in tape)
                or not all(_is_symbol(symbol) for side in tape for symbol in side)):
            raise MachineDescriptionError('Each tape must be a [left, right] pair of symbol lists')
        windows.append(TapeWindow(tape[0], tape[1]))

    # Every head must sit on a materialized cell of its window
    for tape_index, (window, head) in enumerate(zip(windows, heads)):
        if not window.contains(head):
            raise MachineDescriptionError(f'Head {head} of tape {tape_index + 1} is outside its tape window')

    return Configuration(data['state'], windows, heads)
