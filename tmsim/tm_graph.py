from typing import Dict, List, Tuple, Optional
from collections import deque
from dataclasses import dataclass, field
import logging
import threading

from .tm_model import Configuration, Transition
from .tm_configurations import next_configurations

logger = logging.getLogger(__name__)


@dataclass
class GraphNode:
    """
    A configuration in the graph.

    expanded is False while the node has only been discovered as a successor, and
    True once all of its successors are recorded in next.
    """
    config: Configuration
    expanded: bool = False
    next: List[Tuple[str, int]] = field(default_factory=list)


@dataclass
class ConfigurationGraph:
    """
    Memoized graph of reachable configurations, keyed by configuration hash.

    Nodes and edges are only ever added. Every mutation happens under lock.
    """
    start_config: Configuration
    start_hash: str
    nodes: Dict[str, GraphNode] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def __len__(self):
        return len(self.nodes)

    def __contains__(self, config_hash):
        return config_hash in self.nodes

    def get(self, config_hash: str) -> Optional[GraphNode]:
        return self.nodes.get(config_hash)

    def edge_count(self) -> int:
        with self.lock:
            return sum(len(node.next) for node in self.nodes.values())

    def frontier(self) -> List[str]:
        """Hashes of discovered nodes that were not expanded yet."""
        with self.lock:
            return [config_hash for config_hash, node in self.nodes.items() if not node.expanded]

    def halting_nodes(self) -> List[str]:
        """Hashes of expanded nodes without successors."""
        with self.lock:
            return [config_hash for config_hash, node in self.nodes.items() if node.expanded and not node.next]

    def successors(self, config_hash: str) -> List[Tuple[Configuration, int]]:
        with self.lock:
            node = self.nodes[config_hash]
            return [(self.nodes[next_hash].config, index) for next_hash, index in node.next]

    def to_dict(self) -> Dict:
        """JSON-ready form of the graph."""
        with self.lock:
            return {
                'start': self.start_hash,
                'nodes': {
                    config_hash: {
                        'config': node.config.to_dict(),
                        'expanded': node.expanded,
                        'next': [[next_hash, index] for next_hash, index in node.next]
                    }
                    for config_hash, node in self.nodes.items()
                },
                'node_count': len(self.nodes),
                'edge_count': self.edge_count()
            }


def compute_deeper_graph(graph: ConfigurationGraph, start_config: Configuration, target_node_count: int,
                         transitions: Dict[str, List[Transition]], tape_count: int, blank: str) -> int:
    """
    Grows the graph breadth-first from start_config until it holds target_node_count nodes.

    Can be called any number of times, from any configuration and with growing
    targets. Expanded nodes are never expanded again, so a call starting at an
    already expanded configuration returns at once.

    Args:
        graph: The graph to grow in place
        start_config: Configuration to start the breadth-first search from
        target_node_count: Stop once the graph holds at least this many nodes
        transitions: Mapping of state to its list of transitions
        tape_count: Number of tapes of the machine
        blank: The blank symbol

    Returns:
        Number of nodes expanded by this call
    """
    start_hash = start_config.key

    with graph.lock:
        start_node = graph.nodes.get(start_hash)
        if start_node is not None and start_node.expanded:
            return 0

        if start_node is None:
            graph.nodes[start_hash] = GraphNode(start_config)

        queue = deque([start_config])
        expanded_count = 0

        while queue and len(graph.nodes) < target_node_count:
            current_config = queue.popleft()
            current_hash = current_config.key
            current_node = graph.nodes[current_hash]

            # Reached through another path, or by an earlier call
            if current_node.expanded:
                continue

            successors = next_configurations(
                current_config,
                transitions.get(current_config.state),
                tape_count,
                blank
            )

            for next_config, transition_index in successors:
                next_hash = next_config.key

                if next_hash not in graph.nodes:
                    graph.nodes[next_hash] = GraphNode(next_config)
                    queue.append(next_config)

                # One edge per successor, the first transition index wins
                if not any(target == next_hash for target, _ in current_node.next):
                    current_node.next.append((next_hash, transition_index))

            current_node.expanded = True
            expanded_count += 1

        logger.debug(
            "Expanded %d configurations from %s, graph now holds %d nodes (%d queued)",
            expanded_count, start_hash[:12], len(graph.nodes), len(queue)
        )
        return expanded_count


def compute_config_graph(start_config: Configuration, min_nodes: int, transitions: Dict[str, List[Transition]],
                         tape_count: int, blank: str) -> ConfigurationGraph:
    """
    Builds a fresh configuration graph with at least min_nodes nodes, if that many are reachable.

    Args:
        start_config: The start configuration
        min_nodes: Target node count for the first expansion
        transitions: Mapping of state to its list of transitions
        tape_count: Number of tapes of the machine
        blank: The blank symbol

    Returns:
        The new graph
    """
    graph = ConfigurationGraph(start_config, start_config.key)
    compute_deeper_graph(graph, start_config, min_nodes, transitions, tape_count, blank)
    return graph
