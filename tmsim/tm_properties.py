from typing import Dict, List, Set
from collections import deque

from .tm_model import Transition, WILDCARD


def _distinguishable(first: Transition, second: Transition) -> bool:
    """True if some tape has two different concrete patterns."""
    for pattern1, pattern2 in zip(first.tapecondition, second.tapecondition):
        if pattern1 is not WILDCARD and pattern2 is not WILDCARD and pattern1 != pattern2:
            return True
    return False


def is_deterministic(transitions: Dict[str, List[Transition]], exhaustive: bool = False) -> Dict:
    """
    Checks if a transition table is deterministic.

    Two transitions of the same state conflict unless at least one tape tells them
    apart, i.e. both patterns are concrete and different on that tape. Wildcards
    never tell transitions apart.

    By default the scan stops at the first conflicting pair, so 'conflicts' holds
    exactly two transitions. With exhaustive=True every conflicting pair is reported.

    Args:
        transitions: Mapping of state to its list of transitions
        exhaustive: Collect all conflicting pairs instead of the first one

    Returns:
        Dict: {
            'result': bool,  # True if no conflicts were found
            'conflicts': [transition_a, transition_b, ...]  # Conflicting pairs, flattened
        }
    """
    conflicts = []

    for state, transition_list in transitions.items():
        for i in range(len(transition_list)):
            for j in range(i + 1, len(transition_list)):
                first, second = transition_list[i], transition_list[j]

                if _distinguishable(first, second):
                    continue

                conflicts.extend([first, second])
                if not exhaustive:
                    return {'result': False, 'conflicts': conflicts}

    return {'result': not conflicts, 'conflicts': conflicts}


def find_undefined_states(transitions: Dict[str, List[Transition]]) -> Set[str]:
    """
    States that are targeted by a transition but have no entry in the table.

    Reaching one of them during simulation is reported as a missing-transitions
    diagnostic, so a well formed table returns an empty set.
    """
    targets = set()
    for transition_list in transitions.values():
        for transition in transition_list:
            targets.add(transition.to_state)
    return targets - set(transitions)


def reachable_states(transitions: Dict[str, List[Transition]], start_state: str) -> Set[str]:
    """
    All states reachable from start_state in the state diagram.

    This ignores tape contents, so it over-approximates the states that a run can
    actually visit.
    """
    reachable = {start_state}
    queue = deque([start_state])

    while queue:
        current_state = queue.popleft()
        for transition in transitions.get(current_state, []):
            if transition.to_state not in reachable:
                reachable.add(transition.to_state)
                queue.append(transition.to_state)

    return reachable


def halting_states(transitions: Dict[str, List[Transition]]) -> Set[str]:
    """States without outgoing transitions."""
    return {state for state, transition_list in transitions.items() if not transition_list}


def check_all_properties(transitions: Dict[str, List[Transition]], start_state: str) -> Dict:
    """
    Check all transition table properties at once.

    Returns:
        Dict: {
            'deterministic': bool,
            'conflicts': [...],
            'undefined_states': [...],
            'unreachable_states': [...],
            'halting_states': [...]
        }
    """
    determinism = is_deterministic(transitions)
    reachable = reachable_states(transitions, start_state)

    return {
        'deterministic': determinism['result'],
        'conflicts': determinism['conflicts'],
        'undefined_states': sorted(find_undefined_states(transitions)),
        'unreachable_states': sorted(set(transitions) - reachable),
        'halting_states': sorted(halting_states(transitions))
    }
