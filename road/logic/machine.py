# Small deterministic state machine modelled on the 'transitions' library
# https://github.com/pytransitions/transitions

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from graphviz import Digraph

Callback = Callable[["EventData"], Any]


class MachineError(RuntimeError):
    """Raised when the state machine is used incorrectly."""


def _key(value: str | Enum) -> str:
    return value.name if isinstance(value, Enum) else str(value)


def _trigger_key(value: str | Enum) -> str:
    return value.name.lower() if isinstance(value, Enum) else str(value)


class State:
    """A named state with enter callbacks."""

    def __init__(
        self,
        name: str | Enum,
        *,
        on_enter: Optional[Callback | Sequence[Callback]] = None,
        final: bool = False,
    ) -> None:
        self._name = name
        if on_enter is None:
            self._on_enter: List[Callback] = []
        elif callable(on_enter):
            self._on_enter = [on_enter]
        else:
            self._on_enter = list(on_enter)
        self.final = final

    @property
    def name(self) -> str:
        return _key(self._name)

    @property
    def value(self) -> Any:
        return self._name

    def enter(self, data: "EventData") -> None:
        for callback in self._on_enter:
            callback(data)


class EventData:
    """Context passed to the enter callbacks of a single trigger."""

    def __init__(
        self,
        machine: "Machine",
        trigger: Optional[str],
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.machine = machine
        self.trigger = trigger
        self.kwargs = kwargs or {}
        self.source: Optional[State] = machine.current_state
        self.dest: Optional[State] = None


class Machine:
    """Finite state machine where a trigger moves to the first matching destination."""

    def __init__(
        self,
        states: Sequence[str | Enum | State],
        initial_state: str | Enum,
    ) -> None:
        self._states: Dict[str, State] = {}
        self._transitions: Dict[str, Dict[str, List[str]]] = {}
        self._current_state: Optional[State] = None

        for state in states:
            self.add_state(state)
        self._change_state(self.get_state(initial_state), EventData(self, None))

    @property
    def current_state(self) -> State:
        return self._current_state

    def is_state(self, name: str | Enum) -> bool:
        return self._current_state is not None and self._current_state.name == _key(name)

    def add_state(self, state: str | Enum | State) -> State:
        if not isinstance(state, State):
            state = State(state)
        if state.name in self._states:
            raise ValueError(f"State '{state.name}' already registered.")
        self._states[state.name] = state
        return state

    def get_state(self, name: str | Enum) -> State:
        key = _key(name)
        if key not in self._states:
            raise ValueError(f"State '{key}' not found in machine states.")
        return self._states[key]

    def add_transition(
        self,
        source: str | Enum,
        dest: str | Enum,
        trigger: str | Enum,
    ) -> None:
        src = self.get_state(source)
        if src.final:
            raise MachineError(f"Final state '{src.name}' cannot have outgoing transitions.")
        dest_name = self.get_state(dest).name
        by_source = self._transitions.setdefault(_trigger_key(trigger), defaultdict(list))
        by_source[src.name].append(dest_name)

    def trigger(self, name: str | Enum, **kwargs: Any) -> bool:
        """Fire ``name`` from the current state. Returns True if the state changed."""
        key = _trigger_key(name)
        if key not in self._transitions:
            raise MachineError(f"Unknown trigger '{key}'.")

        dests = self._transitions[key].get(self._current_state.name)
        if not dests:
            return False
        data = EventData(self, key, kwargs)
        data.dest = self.get_state(dests[0])
        self._change_state(data.dest, data)
        return True

    def to_graphviz(self) -> Digraph:
        g = Digraph()
        for state in self._states.values():
            shape = "doublecircle" if state is self._current_state else "circle"
            g.node(state.name, shape=shape)

        for trigger, by_source in self._transitions.items():
            for src, dests in by_source.items():
                for dest in dests:
                    g.edge(src, dest, label=trigger)
        return g

    def _change_state(self, dest: State, data: EventData) -> None:
        previous = self._current_state
        if previous is dest:
            return
        data.source = previous
        self._current_state = dest
        dest.enter(data)
