from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple
from enum import Enum
import logging
import threading

from .conf import get_setting
from .tm_model import Configuration, TuringMachine
from .tm_configurations import next_configurations
from .tm_graph import ConfigurationGraph, compute_config_graph, compute_deeper_graph

logger = logging.getLogger(__name__)


class GraphNotInitializedError(RuntimeError):
    """Raised when stepping before a configuration graph was computed."""


class StepOutcome(Enum):
    ADVANCED = 'advanced'
    AMBIGUOUS = 'ambiguous'
    HALTED = 'halted'


class StepRecord(NamedTuple):
    """One successful step of a run"""
    number: int
    from_state: str
    transition_index: int
    configuration: Configuration


class ExecutionController:
    """
    Stepping session over one machine and one shared configuration graph.

    The controller owns the current configuration and the "last transition"
    bookkeeping. The graph is computed lazily while stepping and is kept across
    resets.
    """

    def __init__(self, machine: TuringMachine, graph: Optional[ConfigurationGraph] = None,
                 step_batch: Optional[int] = None, run_delay: Optional[float] = None):
        self.machine = machine
        self.graph = graph
        self.step_batch = step_batch if step_batch is not None else get_setting('STEP_BATCH_NODES')
        self.run_delay = run_delay if run_delay is not None else get_setting('RUN_STEP_DELAY')

        self._start_config = machine.start_configuration()
        self.current_configuration = self._start_config

        self.last_state: Optional[str] = None
        self.last_transition: Optional[int] = None
        self.last_configuration: Optional[Configuration] = None
        self.last_outcome: Optional[StepOutcome] = None

        self.running = False
        self.running_live = False
        self.run_session_id = 0

        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None

    # Accessors

    def get_current_configuration(self) -> Configuration:
        return self.current_configuration

    def get_start_configuration(self) -> Configuration:
        return self._start_config

    def next_configurations_from_state(self, config: Optional[Configuration] = None) -> List[Tuple[Configuration, int]]:
        """Successors of config (the current configuration by default), without touching the graph."""
        if config is None:
            config = self.current_configuration
        return next_configurations(
            config,
            self.machine.transitions.get(config.state),
            self.machine.tape_count,
            self.machine.blank
        )

    # Graph

    def compute_config_graph(self, min_nodes: Optional[int] = None) -> ConfigurationGraph:
        """Computes a fresh graph from the start configuration and makes it the session's graph."""
        if min_nodes is None:
            min_nodes = get_setting('GRAPH_MIN_NODES')

        with self._lock:
            self.graph = compute_config_graph(
                self._start_config,
                min_nodes,
                self.machine.transitions,
                self.machine.tape_count,
                self.machine.blank
            )
            return self.graph

    def compute_deeper_graph_from_state(self, config: Configuration, min_additional_nodes: int) -> int:
        """
        Expands the session's graph from config by at least min_additional_nodes nodes.

        Returns:
            Number of nodes expanded
        """
        with self._lock:
            graph = self._require_graph()
            return compute_deeper_graph(
                graph,
                config,
                len(graph) + min_additional_nodes,
                self.machine.transitions,
                self.machine.tape_count,
                self.machine.blank
            )

    def _require_graph(self) -> ConfigurationGraph:
        if self.graph is None:
            raise GraphNotInitializedError('No configuration graph; call compute_config_graph() first')
        return self.graph

    # Stepping

    def step(self) -> bool:
        """
        Advances the current configuration if it has exactly one successor.

        Returns:
            True if the machine moved. False if it halted or if there is more than
            one successor; last_outcome tells the two apart.
        """
        with self._lock:
            graph = self._require_graph()
            current = self.current_configuration
            node = graph.get(current.key)

            if node is None or not node.expanded:
                # One extra slot for the node itself when it is not in the graph yet
                extra = max(self.step_batch, 1) + (1 if node is None else 0)
                compute_deeper_graph(
                    graph,
                    current,
                    len(graph) + extra,
                    self.machine.transitions,
                    self.machine.tape_count,
                    self.machine.blank
                )
                logger.debug("Configuration in state '%s' was not expanded yet, expanded it", current.state)
                node = graph.get(current.key)

            if len(node.next) > 1:
                logger.warning(
                    "%d next configurations available from state '%s'; choose one explicitly",
                    len(node.next), current.state
                )
                self.last_outcome = StepOutcome.AMBIGUOUS
                return False

            if not node.next:
                logger.info("No next configuration from state '%s'; the machine has stopped", current.state)
                self.last_outcome = StepOutcome.HALTED
                return False

            next_hash, transition_index = node.next[0]
            self._advance(graph.nodes[next_hash].config, transition_index)
            self.last_outcome = StepOutcome.ADVANCED
            return True

    def select_configuration(self, config: Configuration) -> bool:
        """
        Moves to an explicitly chosen configuration.

        A recorded successor of the current configuration is followed like a step.
        Anything else is a manual jump that starts a new run origin.

        Returns:
            True if config was a direct successor, False for a jump
        """
        with self._lock:
            graph = self._require_graph()
            self._cancel_run()

            transition_index = None
            node = graph.get(self.current_configuration.key)
            if node is not None:
                for next_hash, index in node.next:
                    if next_hash == config.key:
                        transition_index = index
                        break

            if transition_index is None:
                self.current_configuration = config
                self._clear_bookkeeping()
                return False

            self._advance(config, transition_index)
            self.last_outcome = StepOutcome.ADVANCED
            return True

    def _advance(self, config: Configuration, transition_index: int):
        self.last_state = self.current_configuration.state
        self.last_transition = transition_index
        self.last_configuration = self.current_configuration
        self.current_configuration = config
        self.running = True

    def _clear_bookkeeping(self):
        self.running = False
        self.last_state = None
        self.last_transition = None
        self.last_configuration = None
        self.last_outcome = None

    def reset(self):
        """Back to the start configuration. The graph is kept."""
        with self._lock:
            self._cancel_run()
            self.current_configuration = self._start_config
            self._clear_bookkeeping()

    # Running

    def run(self, max_steps: Optional[int] = None) -> Iterator[StepRecord]:
        """
        Steps synchronously until the machine halts, branches or max_steps is reached.

        Yields:
            A StepRecord after every successful step
        """
        number = 0
        while max_steps is None or number < max_steps:
            if not self.step():
                return
            number += 1
            yield StepRecord(number, self.last_state, self.last_transition, self.current_configuration)

    def start_run(self, on_step: Optional[Callable] = None, on_stop: Optional[Callable] = None) -> int:
        """
        Starts a live run: one step now, then one step every run_delay seconds.

        The run ends when a step fails (halt or branch) or when stop_run(),
        select_configuration(), reset() or another start_run() is called. Every
        scheduled step first checks that its session is still the current one.

        Args:
            on_step: Called with the controller after every successful step
            on_stop: Called with the controller and the StepOutcome when the run
                ends on its own

        Returns:
            The session id of the new run
        """
        with self._lock:
            self._cancel_run()
            self.running_live = True
            session_id = self.run_session_id

        self._run_tick(session_id, on_step, on_stop)
        return session_id

    def stop_run(self):
        """Stops a live run. A step that is already executing still finishes."""
        with self._lock:
            self.running_live = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _cancel_run(self):
        self.stop_run()
        self.run_session_id += 1

    def _is_current_run(self, session_id: int) -> bool:
        return self.running_live and session_id == self.run_session_id

    def _run_tick(self, session_id: int, on_step: Optional[Callable], on_stop: Optional[Callable]):
        with self._lock:
            if not self._is_current_run(session_id):
                return
            advanced = self.step()
            if not advanced:
                self.running_live = False

        if not advanced:
            if on_stop is not None:
                on_stop(self, self.last_outcome)
            return

        if on_step is not None:
            on_step(self)

        with self._lock:
            if not self._is_current_run(session_id):
                return
            self._timer = threading.Timer(self.run_delay, self._run_tick, args=(session_id, on_step, on_stop))
            self._timer.daemon = True
            self._timer.start()
