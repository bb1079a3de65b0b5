"""
Example machine descriptions in the dictionary format read by machine_from_dict.
"""


def _t(read, move, to=None, write=None):
    """Shorthand for a transition entry."""
    entry = {
        'read': list(read),
        'write': list(write) if write is not None else ['same'] * len(read),
        'move': list(move)
    }
    if to is not None:
        entry['to'] = to
    return entry


# Checks if the number of 1's in the input (consisting of 0's and 1's) is even
CHECK_EVEN = {
    'tapes': 1,
    'blank': ' ',
    'startState': 'even',
    'input': ['101100001100000111000000000011111'],
    'transitions': {
        'even': [
            _t(['1'], ['R'], 'odd'),
            _t(['0'], ['R']),
            _t([' '], ['S'], 'accept'),
        ],
        'odd': [
            _t(['1'], ['R'], 'even'),
            _t(['0'], ['R']),
            _t([' '], ['S'], 'reject'),
        ],
        'accept': [],
        'reject': []
    }
}

# Generates all strings of 0's and 1's with the length of the input
ALL_STRINGS = {
    'tapes': 1,
    'blank': ' ',
    'startState': 'generate',
    'input': ['000'],
    'transitions': {
        'generate': [
            _t(['0'], ['R'], write=['0']),
            _t(['0'], ['R'], write=['1']),
            _t([' '], ['S'], 'done'),
        ],
        'done': []
    }
}

# Configuration graph with a self loop on every cell
SELF_LOOPS = {
    'tapes': 1,
    'blank': ' ',
    'startState': 'go',
    'input': ['000000'],
    'transitions': {
        'go': [
            _t(['0'], ['R']),
            _t(['0'], ['S']),
            _t([' '], ['S'], 'done'),
        ],
        'done': []
    }
}

# Configuration graph that is a DAG
DAG = {
    'tapes': 1,
    'blank': ' ',
    'startState': 'go',
    'input': ['000000'],
    'transitions': {
        'go': [
            _t(['0'], ['R']),
            _t(['0'], ['S'], 'goright'),
            _t([' '], ['S'], 'done'),
        ],
        'goright': [
            _t(['0'], ['R'], 'go'),
        ],
        'done': []
    }
}

# Configuration graph that is a circle
CIRCLE = {
    'tapes': 1,
    'blank': ' ',
    'startState': 'goright',
    'input': ['0'],
    'transitions': {
        'goright': [
            _t(['0'], ['R']),
            _t([' '], ['L'], 'goleft'),
        ],
        'goleft': [
            _t(['0'], ['L']),
            _t([' '], ['R'], 'goright'),
        ]
    }
}

# Adds one to a binary number
BINARY_INCREMENT = {
    'tapes': 1,
    'blank': ' ',
    'startState': 'right',
    'input': ['1011'],
    'transitions': {
        'right': [
            _t(['0'], ['R']),
            _t(['1'], ['R']),
            _t([' '], ['L'], 'carry'),
        ],
        'carry': [
            _t(['1'], ['L'], write=['0']),
            _t(['0'], ['S'], 'done', write=['1']),
            _t([' '], ['S'], 'done', write=['1']),
        ],
        'done': []
    }
}

# Copies the input to the second tape, then walks back on both tapes
COPY = {
    'tapes': 2,
    'blank': ' ',
    'startState': 'copy',
    'input': ['0110'],
    'transitions': {
        'copy': [
            _t(['0', 'all'], ['R', 'R'], write=['same', '0']),
            _t(['1', 'all'], ['R', 'R'], write=['same', '1']),
            _t([' ', ' '], ['L', 'L'], 'back'),
        ],
        'back': [
            _t(['0', '0'], ['L', 'L']),
            _t(['1', '1'], ['L', 'L']),
            _t([' ', ' '], ['R', 'R'], 'done'),
        ],
        'done': []
    }
}

EXAMPLE_MACHINES = {
    'CheckEven': CHECK_EVEN,
    'AllStrings': ALL_STRINGS,
    'SelfLoops': SELF_LOOPS,
    'DAG': DAG,
    'Circle': CIRCLE,
    'BinaryIncrement': BINARY_INCREMENT,
    'Copy': COPY,
}
