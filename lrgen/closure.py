"""An item set (kernel plus everything its closure adds), which is to say, an
LR parsing state.

Usually there is one kernel item in a state, but there are cases where the
kernel has several. For example, in the state

    $accept -> • S
    S -> • S "a"
    S -> • "b"

the transition on S advances the first two items together, so the next state
has both of them in its kernel:

    $accept -> S •
    S -> S • "a"

(For an LR(0) parser that state is a shift/reduce conflict. It might not be
one for other kinds of parsers, which is not our problem here.)
"""

import logging
import typing

from .errors import NonTerminatingClosure, UnknownSymbol
from .items import KernelKey, LRItem, Transition

if typing.TYPE_CHECKING:
    from .collection import CanonicalCollection


closure_log = logging.getLogger("lrgen.closure")


class Closure:
    collection: "CanonicalCollection"

    # Assigned by the collection when the state is registered.
    number: int | None

    kernel_items: list[LRItem]

    # Kernel items plus all of the items the closure added, in the order they
    # were added.
    items: list[LRItem]

    # Outgoing transitions, keyed by symbol name, in the order we first saw
    # each symbol.
    transitions: dict[str, Transition]

    # Non-terminals we have already expanded in this state. This is what stops
    # us from recursing forever on something like `S -> S "a"`. It belongs to
    # the state: another state has to expand S all over again.
    _handled_non_terminals: set[str]

    _expanded: bool

    def __init__(self, kernel_items: typing.Iterable[LRItem], collection: "CanonicalCollection"):
        self.collection = collection
        self.number = None
        self.kernel_items = []
        self.items = []
        self.transitions = {}
        self._handled_non_terminals = set()
        self._expanded = False

        for item in kernel_items:
            self.add_kernel_item(item)

        if len(self.kernel_items) == 0:
            raise ValueError("A state needs at least one kernel item")

    @property
    def kernel_key(self) -> KernelKey:
        return frozenset(item.key for item in self.kernel_items)

    @property
    def is_final(self) -> bool:
        return len(self.items) == 1 and self.items[0].is_final

    @property
    def is_accept(self) -> bool:
        return self.is_final and self.items[0].production.is_augmented

    @property
    def reduce_items(self) -> list[LRItem]:
        return [item for item in self.items if item.is_final]

    def is_kernel_item(self, item: LRItem) -> bool:
        return any(k is item for k in self.kernel_items)

    def has_transition_on_symbol(self, symbol: str) -> bool:
        return symbol in self.transitions

    def get_transition_on_symbol(self, symbol: str) -> Transition | None:
        return self.transitions.get(symbol)

    def add_kernel_item(self, item: LRItem):
        self.kernel_items.append(item)
        self.add_item(item)

    def add_item(self, item: LRItem):
        """Add an item, and close over it.

        If the dot in the item is right before a non-terminal then we also
        have to be at the start of every production for that non-terminal,
        and so on down. Each non-terminal is expanded once per state.

        (This is the recursive definition, run off an explicit stack. Popping
        the productions in reverse keeps the same order the recursion would
        have produced.)
        """
        non_terminal_count = len(self.collection.grammar.non_terminals)

        pending = [item]
        while len(pending) > 0:
            item = pending.pop()
            self.items.append(item)

            if not item.should_closure:
                continue

            symbol = item.current_symbol
            assert symbol is not None
            if symbol.name in self._handled_non_terminals:
                continue

            self._handled_non_terminals.add(symbol.name)
            if len(self._handled_non_terminals) > non_terminal_count:
                raise NonTerminatingClosure(self.number, len(self._handled_non_terminals))

            productions = self.collection.grammar.productions_for_symbol(symbol)
            if len(productions) == 0:
                raise UnknownSymbol(symbol, item.production)

            added = [self.collection.item_for(production, 0) for production in productions]
            pending.extend(reversed(added))

    def add_symbol_transition(self, item: LRItem, advanced: LRItem):
        symbol = item.current_symbol
        assert symbol is not None

        transition = self.transitions.get(symbol.name)
        if transition is None:
            transition = Transition(items=[], kernel=[])
            self.transitions[symbol.name] = transition

        transition.items.append(item)
        transition.kernel.append(advanced)

    def goto(self):
        """Compute every outgoing transition of this state.

        Every item with something after its dot advances; items that advance
        over the same symbol end up together in the kernel of one target
        state. The collection decides whether that kernel is a state we have
        already seen or a new one (which it queues up for its own goto).

        Only the first call does anything.
        """
        if self._expanded:
            return
        self._expanded = True

        for item in self.items:
            if not item.is_final:
                item.goto(self)

        for symbol, transition in self.transitions.items():
            target, _ = self.collection.state_for_kernel(transition.kernel)
            transition.state = target
            if closure_log.isEnabledFor(logging.DEBUG):
                closure_log.debug(f"{self.number} --{symbol}--> {target.number}")

    def format(self) -> str:
        lines = [f"State {self.number}:" + (" (accept)" if self.is_accept else "")]
        for item in self.items:
            marker = "*" if self.is_kernel_item(item) else " "
            lines.append(f"  {marker} {item.format()}")
        for symbol, transition in self.transitions.items():
            target = "?" if transition.state is None else transition.state.number
            lines.append(f"    {symbol} -> {target}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Closure(number={self.number}, kernel={[i.format() for i in self.kernel_items]})"
