import dataclasses
import typing

from .errors import InvalidOperation
from .grammar import Production, Symbol

if typing.TYPE_CHECKING:
    from .closure import Closure


# An item is identified by (production number, dot position), and nothing
# else. A state is identified by the set of the keys of its kernel items.
ItemKey = typing.Tuple[int, int]
KernelKey = frozenset[ItemKey]


class LRItem:
    """A production with a dot in it, which tells us how much of the
    production we have recognized so far:

        S -> S • "a"

    Items are shared: every state that needs `S -> S • "a"` holds the same
    instance, which the canonical collection hands out by key. Don't make
    these yourself; ask the collection with `item_for`.
    """

    production: Production
    dot_position: int

    def __init__(self, production: Production, dot_position: int):
        if not 0 <= dot_position <= len(production.rhs):
            raise ValueError(
                f"Dot position {dot_position} is out of range for {production.format()}"
            )
        self.production = production
        self.dot_position = dot_position

    @staticmethod
    def key_for_item(production: Production, dot_position: int) -> ItemKey:
        return (production.number, dot_position)

    @property
    def key(self) -> ItemKey:
        return LRItem.key_for_item(self.production, self.dot_position)

    @property
    def current_symbol(self) -> Symbol | None:
        """The symbol right after the dot, or None if the dot is at the end."""
        if self.dot_position == len(self.production.rhs):
            return None
        return self.production.rhs[self.dot_position]

    @property
    def is_final(self) -> bool:
        return self.current_symbol is None

    @property
    def should_closure(self) -> bool:
        symbol = self.current_symbol
        return symbol is not None and symbol.is_non_terminal

    @property
    def next_symbols(self) -> typing.Tuple[Symbol, ...]:
        return self.production.rhs[self.dot_position :]

    def goto(self, state: "Closure") -> "LRItem":
        """Advance the dot past the current symbol.

        This also records, on `state`, that we take part in the transition on
        our current symbol. The advanced item becomes one of the kernel items
        of the state at the other end of that transition.
        """
        if self.is_final:
            raise InvalidOperation(f"Can't advance the final item {self.format()}")

        advanced = state.collection.item_for(self.production, self.dot_position + 1)
        state.add_symbol_transition(self, advanced)
        return advanced

    def format(self) -> str:
        bits = [s.name for s in self.production.rhs]
        bits.insert(self.dot_position, "•")
        return f"{self.production.lhs.name} -> {' '.join(bits)}"

    def __repr__(self) -> str:
        return f"LRItem({self.format()})"


@dataclasses.dataclass
class Transition:
    """The outgoing edge of a state on one symbol.

    `items` are the items of the source state that have the symbol after
    their dot; `kernel` holds the same items with the dot advanced, in the
    same order. `state` is the target, attached once the source state has
    finished its goto.
    """

    items: list[LRItem]
    kernel: list[LRItem]
    state: "Closure | None" = None
