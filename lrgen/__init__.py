"""Build the canonical collection of LR(0) item sets for a grammar: the states
of an LR parser and the transitions between them.

    grammar = Grammar([("S", 'S "a"'), ("S", '"b"')])
    collection = CanonicalCollection.from_grammar(grammar)

    print(collection.format())

Turning the collection into parse tables, and parsing with those tables, is
somebody else's job.
"""
from .closure import Closure
from .collection import CanonicalCollection
from .errors import (
    GrammarError,
    InvalidOperation,
    LRGenError,
    NonTerminatingClosure,
    UnknownSymbol,
    UnrecognizedToken,
)
from .grammar import (
    AUGMENTED_START,
    EOF,
    EPSILON,
    Grammar,
    LexRule,
    Production,
    Symbol,
    SymbolKind,
)
from .items import ItemKey, KernelKey, LRItem, Transition
from .tokenizer import Token, Tokenizer, generic_tokenize
