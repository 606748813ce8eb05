"""Everything that can go wrong while building item sets or scanning input.

None of these are recoverable for the run that raised them: the automaton is
either built completely or not at all, and building it again with the same
grammar fails the same way.
"""

import typing

if typing.TYPE_CHECKING:
    from .grammar import Production, Symbol


class LRGenError(Exception):
    pass


class GrammarError(LRGenError, ValueError):
    """The grammar handed to us doesn't make sense."""


class InvalidOperation(LRGenError):
    """Somebody asked a final item (dot at the end) to advance its dot."""


class UnknownSymbol(LRGenError):
    symbol: "Symbol"
    production: "Production"

    def __init__(self, symbol: "Symbol", production: "Production"):
        self.symbol = symbol
        self.production = production

    def __str__(self):
        return (
            f"No productions for non-terminal {self.symbol.name}, "
            f"referenced by production {self.production.number}: {self.production.format()}"
        )


class NonTerminatingClosure(LRGenError):
    state_number: int | None
    handled: int

    def __init__(self, state_number: int | None, handled: int):
        self.state_number = state_number
        self.handled = handled

    def __str__(self):
        state = "unnumbered state" if self.state_number is None else f"state {self.state_number}"
        return (
            f"Closure of {state} expanded {self.handled} non-terminals, which is more "
            "than the grammar has"
        )


class UnrecognizedToken(LRGenError):
    char: str
    position: int

    def __init__(self, char: str, position: int):
        self.char = char
        self.position = position

    def __str__(self):
        return f'Unexpected token: "{self.char}" at {self.position}'
