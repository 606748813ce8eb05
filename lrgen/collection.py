"""The canonical collection of LR(0) item sets.

This is the thing that owns identity. Items are deduplicated by
(production, dot position) and states by the set of their kernel item keys,
and both tables live here, in one collection object per grammar. Nothing
else creates items or numbers states; everything else asks.

Construction starts from the closure of `$accept -> • S` and works through a
queue of states whose transitions we haven't computed yet. Each state's goto
may find kernels we've never seen, which become new states at the back of
the queue, so states are numbered breadth-first from the start state. When
the queue is empty we're done. It does end: there are only so many items, and
so only so many sets of them, and no state is processed twice.
"""

import collections
import json
import logging
import typing

from .closure import Closure
from .errors import InvalidOperation
from .grammar import Grammar, Production
from .items import ItemKey, KernelKey, LRItem


collection_log = logging.getLogger("lrgen.collection")


class CanonicalCollection:
    grammar: Grammar

    # Every item anybody has asked for, by key, in the order they were made.
    _items: dict[ItemKey, LRItem]

    # States by number (their index here) and by kernel key.
    _states: list[Closure]
    _states_by_kernel: dict[KernelKey, Closure]

    # States that have been registered but haven't run their goto yet.
    _pending: collections.deque[Closure]

    _started: bool
    _built: bool

    def __init__(self, grammar: Grammar):
        self.grammar = grammar
        self._items = {}
        self._states = []
        self._states_by_kernel = {}
        self._pending = collections.deque()
        self._started = False
        self._built = False

    @classmethod
    def from_grammar(cls, grammar: Grammar) -> "CanonicalCollection":
        return CanonicalCollection(grammar).build()

    ###########################################################################
    # Items
    ###########################################################################
    def register_item(self, item: LRItem) -> LRItem:
        key = item.key
        if key in self._items:
            raise ValueError(f"Item {item.format()} is already registered")
        self._items[key] = item
        return item

    def is_item_registered(self, key: ItemKey) -> bool:
        return key in self._items

    def get_item_for_key(self, key: ItemKey) -> LRItem:
        return self._items[key]

    def item_for(self, production: Production, dot_position: int) -> LRItem:
        """Return *the* item for this production and dot position, making and
        registering it if this is the first time anybody asked.
        """
        key = LRItem.key_for_item(production, dot_position)
        item = self._items.get(key)
        if item is None:
            item = self.register_item(LRItem(production, dot_position))
        return item

    @property
    def items(self) -> list[LRItem]:
        return list(self._items.values())

    @property
    def item_count(self) -> int:
        return len(self._items)

    ###########################################################################
    # States
    ###########################################################################
    def register_state(self, state: Closure) -> int:
        """Give the state the next number and index it by its kernel."""
        kernel_key = state.kernel_key
        if kernel_key in self._states_by_kernel:
            existing = self._states_by_kernel[kernel_key]
            raise ValueError(f"A state with this kernel is already registered as {existing.number}")

        state.number = len(self._states)
        self._states.append(state)
        self._states_by_kernel[kernel_key] = state
        return state.number

    def is_state_registered(self, kernel_key: KernelKey) -> bool:
        return kernel_key in self._states_by_kernel

    def state_for_kernel(self, kernel_items: typing.Sequence[LRItem]) -> tuple[Closure, bool]:
        """Find the state with exactly these kernel items, or make it.

        Returns the state and whether it was just made. A new state has
        already been closed and registered, and is queued for its goto.
        """
        kernel_key = frozenset(item.key for item in kernel_items)
        existing = self._states_by_kernel.get(kernel_key)
        if existing is not None:
            if collection_log.isEnabledFor(logging.DEBUG):
                collection_log.debug(f"reusing state {existing.number} for {sorted(kernel_key)}")
            return existing, False

        state = Closure(kernel_items, self)
        self.register_state(state)
        self._pending.append(state)
        if collection_log.isEnabledFor(logging.DEBUG):
            collection_log.debug(
                f"new state {state.number}: {len(state.kernel_items)} kernel items, "
                f"{len(state.items)} items"
            )
        return state, True

    def get_state(self, number: int) -> Closure:
        return self._states[number]

    @property
    def states(self) -> list[Closure]:
        return list(self._states)

    @property
    def state_count(self) -> int:
        return len(self._states)

    @property
    def start_state(self) -> Closure:
        return self._states[0]

    @property
    def accept_states(self) -> list[Closure]:
        return [state for state in self._states if state.is_accept]

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> typing.Iterator[Closure]:
        return iter(self._states)

    ###########################################################################
    # Construction
    ###########################################################################
    def build(self) -> "CanonicalCollection":
        """Build every state reachable from the start state.

        If this raises, the collection is only partly built and can't be
        finished; throw it away.
        """
        if self._built:
            return self
        if self._started:
            raise InvalidOperation("This collection failed to build before; make a new one")
        self._started = True

        start_item = self.item_for(self.grammar.augmented_production, 0)
        self.state_for_kernel([start_item])

        while len(self._pending) > 0:
            state = self._pending.popleft()
            state.goto()

        self._built = True
        collection_log.info(
            f"built {len(self._states)} states from {len(self._items)} items "
            f"({len(self.grammar.productions)} productions)"
        )
        return self

    ###########################################################################
    # Output
    ###########################################################################
    def successors(self) -> list[dict[str, int]]:
        """`successors()[i]` maps each symbol to the number of the state you
        get to by taking it from state i.
        """
        result = []
        for state in self._states:
            edges = {}
            for symbol, transition in state.transitions.items():
                assert transition.state is not None
                assert transition.state.number is not None
                edges[symbol] = transition.state.number
            result.append(edges)
        return result

    def find_path_to_state(self, target: Closure) -> list[str]:
        """Trace the path of grammar symbols from the start state (which is
        always state 0) to the target state. Handy when you're staring at a
        state and want to know how anybody could ever get there.

        This function raises KeyError if no path is found.
        """
        if target.number is None or self._states_by_kernel.get(target.kernel_key) is not target:
            raise KeyError("The target state is not in this collection")

        successors = self.successors()
        visited = set()

        queue: collections.deque = collections.deque()
        queue.appendleft((0, []))
        while len(queue) > 0:
            state_index, path = queue.pop()
            if state_index == target.number:
                return path

            if state_index in visited:
                continue
            visited.add(state_index)

            for symbol, successor in successors[state_index].items():
                queue.appendleft((successor, path + [symbol]))

        raise KeyError("Unable to find a path to the target state!")

    def dump_state(self) -> str:
        return json.dumps(
            {
                str(state.number): {
                    "kernel": [item.format() for item in state.kernel_items],
                    "items": [item.format() for item in state.items],
                    "transitions": successors,
                    "final": state.is_final,
                    "accept": state.is_accept,
                }
                for state, successors in zip(self._states, self.successors())
            },
            indent=4,
            sort_keys=True,
        )

    def format(self) -> str:
        return "\n\n".join(state.format() for state in self._states)
