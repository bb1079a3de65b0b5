import threading
from django.test import TestCase
from tmsim.tm_model import Move, TapeWindow, Transition
from tmsim.tm_configurations import start_configuration
from tmsim.tm_description import machine_from_dict
from tmsim.tm_graph import ConfigurationGraph, compute_config_graph, compute_deeper_graph
from tmsim.example_machines import ALL_STRINGS, SELF_LOOPS, DAG, CIRCLE


def build_graph(description, min_nodes):
    machine = machine_from_dict(description)
    graph = compute_config_graph(
        machine.start_configuration(), min_nodes, machine.transitions, machine.tape_count, machine.blank
    )
    return machine, graph


def infinite_machine(branching=False):
    """A machine that walks right forever, writing 0 (and 1 when branching)."""
    transitions = [Transition('s', 's', (None,), ('0',), (Move.R,))]
    if branching:
        transitions.append(Transition('s', 's', (None,), ('1',), (Move.R,)))
    return {'s': transitions}


class TestComputeConfigGraph(TestCase):
    """Test cases for building a fresh configuration graph"""

    def test_all_strings_full_graph(self):
        """Test the complete graph of AllStrings"""
        # 1 + 2 + 4 + 8 generating configurations and 8 final ones
        _, graph = build_graph(ALL_STRINGS, 1000)

        self.assertEqual(len(graph), 23)
        self.assertEqual(graph.edge_count(), 22)
        self.assertEqual(graph.frontier(), [])
        self.assertEqual(len(graph.halting_nodes()), 8)
        for config_hash in graph.halting_nodes():
            self.assertEqual(graph.get(config_hash).config.state, 'done')

    def test_start_node(self):
        """Test the start node of a fresh graph"""
        machine, graph = build_graph(ALL_STRINGS, 10)
        start = machine.start_configuration()

        self.assertEqual(graph.start_config, start)
        self.assertEqual(graph.start_hash, start.key)
        self.assertIn(start.key, graph)
        self.assertTrue(graph.get(start.key).expanded)
        self.assertEqual([index for _, index in graph.get(start.key).next], [0, 1])

    def test_self_loops(self):
        """Test a graph with self loops"""
        machine, graph = build_graph(SELF_LOOPS, 1000)
        start_hash = machine.start_configuration().key

        # go at positions 0..6 plus done
        self.assertEqual(len(graph), 8)
        self.assertEqual(graph.edge_count(), 13)
        self.assertIn((start_hash, 1), graph.get(start_hash).next)

    def test_dag(self):
        """Test a graph that is a DAG"""
        _, graph = build_graph(DAG, 1000)

        # go at 0..6, goright at 0..5, done
        self.assertEqual(len(graph), 14)
        self.assertEqual(graph.edge_count(), 19)
        self.assertEqual(len(graph.halting_nodes()), 1)

    def test_circle(self):
        """Test a graph that is a circle"""
        _, graph = build_graph(CIRCLE, 1000)

        self.assertEqual(len(graph), 7)
        self.assertEqual(graph.edge_count(), 7)
        self.assertEqual(graph.frontier(), [])
        self.assertEqual(graph.halting_nodes(), [])

    def test_every_edge_target_is_a_node(self):
        """Test that every edge points to a known node"""
        _, graph = build_graph(DAG, 8)

        for node in graph.nodes.values():
            for next_hash, _ in node.next:
                self.assertIn(next_hash, graph)

    def test_target_bound_on_infinite_machine(self):
        """Test the node bound on a machine that never halts"""
        start = start_configuration('s', [TapeWindow()], 1, '_')

        graph = compute_config_graph(start, 50, infinite_machine(), 1, '_')
        self.assertEqual(len(graph), 50)

        graph = compute_config_graph(start, 50, infinite_machine(branching=True), 1, '_')
        self.assertGreaterEqual(len(graph), 50)
        self.assertLessEqual(len(graph), 51)

    def test_target_already_reached(self):
        """Test a target that the start node already meets"""
        start = start_configuration('s', [TapeWindow()], 1, '_')
        graph = compute_config_graph(start, 1, infinite_machine(), 1, '_')

        self.assertEqual(len(graph), 1)
        self.assertFalse(graph.get(start.key).expanded)

    def test_identical_successors_share_one_edge(self):
        """Test that identical successors share one edge"""
        transitions = {'s': [
            Transition('s', 's', ('1',), (None,), (Move.R,)),
            Transition('s', 's', (None,), (None,), (Move.R,)),
        ]}
        start = start_configuration('s', [TapeWindow.from_string('1')], 1, '_')

        graph = compute_config_graph(start, 10, transitions, 1, '_')

        # Both transitions lead to the same configuration; the first index is kept
        start_node = graph.get(start.key)
        self.assertEqual(len(start_node.next), 1)
        self.assertEqual(start_node.next[0][1], 0)

    def test_missing_state_is_a_dead_end(self):
        """Test that a missing state ends a path"""
        transitions = {'s': [Transition('s', 'ghost', (None,), (None,), (Move.S,))]}
        start = start_configuration('s', [TapeWindow.from_string('1')], 1, '_')

        with self.assertLogs('tmsim.tm_configurations', level='ERROR'):
            graph = compute_config_graph(start, 10, transitions, 1, '_')

        self.assertEqual(len(graph), 2)
        ghost = [node for node in graph.nodes.values() if node.config.state == 'ghost'][0]
        self.assertTrue(ghost.expanded)
        self.assertEqual(ghost.next, [])

    def test_to_dict(self):
        """Test the dictionary form"""
        _, graph = build_graph(CIRCLE, 1000)
        data = graph.to_dict()

        self.assertEqual(data['start'], graph.start_hash)
        self.assertEqual(data['node_count'], 7)
        self.assertEqual(data['edge_count'], 7)
        start = data['nodes'][graph.start_hash]
        self.assertEqual(start['config']['state'], 'goright')
        self.assertTrue(start['expanded'])
        self.assertEqual(len(start['next']), 1)

    def test_queries_wait_for_the_lock(self):
        """Test that graph queries wait while another thread holds the lock"""
        _, graph = build_graph(ALL_STRINGS, 1000)
        results = {}

        def query():
            results['frontier'] = graph.frontier()
            results['halting'] = graph.halting_nodes()
            results['edges'] = graph.edge_count()
            results['successors'] = graph.successors(graph.start_hash)

        with graph.lock:
            worker = threading.Thread(target=query)
            worker.start()
            worker.join(0.2)
            self.assertTrue(worker.is_alive())
            self.assertEqual(results, {})

        worker.join(5)
        self.assertFalse(worker.is_alive())
        self.assertEqual(results['frontier'], [])
        self.assertEqual(len(results['halting']), 8)
        self.assertEqual(results['edges'], 22)
        self.assertEqual([index for _, index in results['successors']], [0, 1])


class TestComputeDeeperGraph(TestCase):
    """Test cases for growing an existing configuration graph"""

    def setUp(self):
        self.machine = machine_from_dict(ALL_STRINGS)
        self.start = self.machine.start_configuration()

    def deeper(self, graph, config, target):
        return compute_deeper_graph(
            graph, config, target, self.machine.transitions, self.machine.tape_count, self.machine.blank
        )

    def test_stops_at_target(self):
        """Test that growth stops at the target"""
        graph = ConfigurationGraph(self.start, self.start.key)
        expanded = self.deeper(graph, self.start, 5)

        # start adds 2, one child adds 2 more
        self.assertEqual(len(graph), 5)
        self.assertEqual(expanded, 2)
        self.assertEqual(len(graph.frontier()), 3)

    def test_expanded_start_is_a_no_op(self):
        """Test growing from an expanded node"""
        graph = ConfigurationGraph(self.start, self.start.key)
        self.deeper(graph, self.start, 5)
        nodes_before = len(graph)
        edges_before = graph.edge_count()

        self.assertEqual(self.deeper(graph, self.start, 5), 0)
        self.assertEqual(self.deeper(graph, self.start, 100), 0)
        self.assertEqual(len(graph), nodes_before)
        self.assertEqual(graph.edge_count(), edges_before)

    def test_idempotent_on_full_graph(self):
        """Test growing a complete graph"""
        graph = ConfigurationGraph(self.start, self.start.key)
        self.deeper(graph, self.start, 1000)
        snapshot = graph.to_dict()

        for config_hash in list(graph.nodes):
            self.assertEqual(self.deeper(graph, graph.get(config_hash).config, 1000), 0)

        self.assertEqual(graph.to_dict(), snapshot)

    def test_grows_from_frontier(self):
        """Test growing from a frontier node"""
        graph = ConfigurationGraph(self.start, self.start.key)
        self.deeper(graph, self.start, 5)
        keys_before = set(graph.nodes)

        frontier_config = graph.get(graph.frontier()[0]).config
        expanded = self.deeper(graph, frontier_config, 9)

        self.assertGreater(expanded, 0)
        self.assertGreaterEqual(len(graph), 9)
        self.assertTrue(keys_before.issubset(graph.nodes))
        self.assertTrue(graph.get(frontier_config.key).expanded)

    def test_monotonic_growth(self):
        """Test that nodes are only ever added"""
        graph = ConfigurationGraph(self.start, self.start.key)
        seen = set()

        for target in (3, 6, 12, 30):
            for config_hash in graph.frontier() or [self.start.key]:
                self.deeper(graph, graph.get(config_hash).config if config_hash in graph else self.start, target)
            self.assertTrue(seen.issubset(graph.nodes))
            seen = set(graph.nodes)

        self.assertEqual(len(graph), 23)

    def test_unknown_start_is_inserted(self):
        """Test growing from a configuration not in the graph"""
        graph = ConfigurationGraph(self.start, self.start.key)
        self.deeper(graph, self.start, 3)

        other = start_configuration('generate', [TapeWindow.from_string('00')], 1, ' ')
        self.deeper(graph, other, len(graph) + 3)

        self.assertIn(other.key, graph)
        self.assertTrue(graph.get(other.key).expanded)
