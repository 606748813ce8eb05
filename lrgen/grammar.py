"""The grammar model that the item set construction works from.

Grammars are written the same dense way the generator has always consumed
them, a list of productions:

    grammar = Grammar(
        [
            ("E", 'E "+" T'),
            ("E", "T"),
            ("T", '"(" E ")"'),
            ("T", '"id"'),
        ]
    )

Each production is a tuple where the first element is the name of the
non-terminal being defined and the second element is the right-hand side,
either as a list of symbol names or as a single space-separated string.
Terminals are quoted (`"id"` or `'id'`) or declared by name through `tokens`
(or through a lex rule that produces them); every other name is a
non-terminal. Use an empty right-hand side, or `ε`, for an empty production:

    ("O", []),
    ("O", "ε"),

both mean that O can be matched with nothing.

We add the augmented start production `$accept -> <start>` ourselves; it is
always production 0, and the user's productions are numbered from 1 in the
order they were given.
"""

import dataclasses
import enum
import re
import typing

from .errors import GrammarError

EOF = "$"
EPSILON = "ε"
AUGMENTED_START = "$accept"

_RESERVED = (EOF, AUGMENTED_START)

# A quoted terminal may contain spaces, so we can't just split on whitespace.
_RHS_PATTERN = re.compile(r"\"[^\"]*\"|'[^']*'|\S+")


def _is_quoted(name: str) -> bool:
    return len(name) >= 2 and name[0] == name[-1] and name[0] in "'\""


class SymbolKind(enum.Enum):
    TERMINAL = "terminal"
    NON_TERMINAL = "non-terminal"


@dataclasses.dataclass(frozen=True)
class Symbol:
    """A grammar symbol. There is exactly one of these per name in a grammar,
    and every production that mentions the name shares it.
    """

    name: str
    kind: SymbolKind

    @classmethod
    def from_string(cls, name: str, tokens: typing.Container[str] = ()) -> "Symbol":
        if _is_quoted(name) or name in tokens or name == EOF or name == EPSILON:
            return Symbol(name, SymbolKind.TERMINAL)
        return Symbol(name, SymbolKind.NON_TERMINAL)

    @property
    def is_terminal(self) -> bool:
        return self.kind is SymbolKind.TERMINAL

    @property
    def is_non_terminal(self) -> bool:
        return self.kind is SymbolKind.NON_TERMINAL

    @property
    def raw(self) -> str:
        """The name without its quotes, which is what the tokenizer reports
        for literal terminals.
        """
        if _is_quoted(self.name):
            return self.name[1:-1]
        return self.name

    def __str__(self) -> str:
        return self.name


@dataclasses.dataclass(frozen=True)
class Production:
    number: int
    lhs: Symbol
    rhs: typing.Tuple[Symbol, ...]
    is_augmented: bool = False

    @property
    def is_epsilon(self) -> bool:
        return len(self.rhs) == 0

    def format(self) -> str:
        if self.is_epsilon:
            return f"{self.lhs.name} -> {EPSILON}"
        return f"{self.lhs.name} -> {' '.join(s.name for s in self.rhs)}"

    def __str__(self) -> str:
        return self.format()


class LexRule:
    """A regular expression and the token it produces.

    `token` is either a quoted literal (the token's type and value are then
    both the literal, without quotes) or a token name (the value is whatever
    text matched). Skip rules, usually whitespace, don't need a token at all.
    """

    pattern: str
    token: str | None
    skip: bool
    regex: re.Pattern

    def __init__(self, pattern: str, token: str | None = None, *, skip: bool = False):
        if token is None and not skip:
            raise GrammarError(f"Lex rule {pattern!r} needs a token unless it is a skip rule")

        self.pattern = pattern
        self.token = token
        self.skip = skip
        self.regex = re.compile(pattern)

    @classmethod
    def literal(cls, terminal: Symbol) -> "LexRule":
        return LexRule(re.escape(terminal.raw), terminal.name)

    @property
    def is_literal(self) -> bool:
        return self.token is not None and _is_quoted(self.token)

    def match(self, source: str, position: int) -> str | None:
        """Match this rule right at `position`, returning the matched text.

        Rules that can only match the empty string here are treated as not
        matching, otherwise the tokenizer would never advance.
        """
        m = self.regex.match(source, position)
        if m is None or m.end() == position:
            return None
        return m.group(0)

    def __repr__(self) -> str:
        if self.skip:
            return f"LexRule({self.pattern!r}, skip=True)"
        return f"LexRule({self.pattern!r}, {self.token!r})"


def _split_rhs(rhs: str | typing.Iterable[str]) -> list[str]:
    if isinstance(rhs, str):
        names = _RHS_PATTERN.findall(rhs)
    else:
        names = list(rhs)
    return [name for name in names if name != EPSILON]


class Grammar:
    """A flat, numbered list of productions plus the lexical rules for the
    terminals.

    This is what the canonical collection consumes: it asks for the
    productions of a non-terminal (`productions_for_symbol`) and for the
    augmented start production, and nothing else.
    """

    start_symbol: Symbol
    productions: list[Production]
    lex_rules: list[LexRule]

    # Every symbol in the grammar, keyed by name, in the order we first saw
    # them. Productions share these instances.
    _symbols: dict[str, Symbol]

    # The productions for each non-terminal, in the order they were given.
    _by_lhs: dict[str, list[Production]]

    def __init__(
        self,
        productions: list[typing.Tuple[str, str | list[str]]],
        *,
        start: str | None = None,
        lex: list[LexRule] | None = None,
        tokens: typing.Iterable[str] | None = None,
    ):
        if len(productions) == 0:
            raise GrammarError("A grammar needs at least one production")

        token_names = set(tokens or ())
        if lex is not None:
            token_names.update(
                rule.token for rule in lex if rule.token is not None and not rule.is_literal
            )

        split = [(lhs, _split_rhs(rhs)) for lhs, rhs in productions]

        reserved = sorted(
            {name for lhs, rhs in split for name in [lhs, *rhs] if name in _RESERVED}
        )
        if reserved:
            raise GrammarError(
                "Can't use {symbols} in grammars, {what} reserved.".format(
                    symbols=" or ".join(reserved),
                    what="it's" if len(reserved) == 1 else "they're",
                )
            )

        self._symbols = {}
        self._by_lhs = {}

        if start is None:
            start = split[0][0]
        if start not in {lhs for lhs, _ in split}:
            raise GrammarError(f"Start symbol {start} has no productions")

        self.start_symbol = self._symbol(start, token_names)
        augmented = Production(
            number=0,
            lhs=self._symbol(AUGMENTED_START, token_names),
            rhs=(self.start_symbol,),
            is_augmented=True,
        )
        self.productions = [augmented]
        self._by_lhs[AUGMENTED_START] = [augmented]

        for lhs, rhs in split:
            lhs_symbol = self._symbol(lhs, token_names)
            if lhs_symbol.is_terminal:
                raise GrammarError(f"Terminal {lhs} can't be on the left-hand side of a production")

            production = Production(
                number=len(self.productions),
                lhs=lhs_symbol,
                rhs=tuple(self._symbol(name, token_names) for name in rhs),
            )
            self.productions.append(production)
            self._by_lhs.setdefault(lhs, []).append(production)

        if lex is None:
            # Longest literal first, so that "==" wins over "=".
            literals = sorted(
                (s for s in self.terminals if _is_quoted(s.name)),
                key=lambda s: len(s.raw),
                reverse=True,
            )
            lex = [LexRule.literal(s) for s in literals]
        self.lex_rules = list(lex)

    @classmethod
    def from_dict(cls, data: dict[str, typing.Any]) -> "Grammar":
        """Build a grammar from the in-memory BNF shape:

            {
                "lex": [["\\s+", None], ["\\d+", "NUMBER"]],
                "bnf": {"E": ['E "+" NUMBER', "NUMBER"]},
                "start": "E",
            }

        A lex rule with a `None` token is a skip rule. An alternative may be
        a string or a list of symbol names.
        """
        bnf = data.get("bnf")
        if not bnf:
            raise GrammarError("Grammar has no bnf section")

        productions = []
        for lhs, alternatives in bnf.items():
            if isinstance(alternatives, str):
                alternatives = [alternatives]
            for alternative in alternatives:
                productions.append((lhs, alternative))

        lex = None
        if "lex" in data:
            lex = [
                LexRule(pattern, token, skip=token is None) for pattern, token in data["lex"]
            ]

        return Grammar(
            productions,
            start=data.get("start"),
            lex=lex,
            tokens=data.get("tokens"),
        )

    def _symbol(self, name: str, tokens: typing.Container[str]) -> Symbol:
        symbol = self._symbols.get(name)
        if symbol is None:
            symbol = Symbol.from_string(name, tokens)
            self._symbols[name] = symbol
        return symbol

    @property
    def augmented_production(self) -> Production:
        return self.productions[0]

    @property
    def terminals(self) -> list[Symbol]:
        return [s for s in self._symbols.values() if s.is_terminal]

    @property
    def non_terminals(self) -> list[Symbol]:
        """Every non-terminal mentioned anywhere, including ones that nobody
        wrote productions for.
        """
        return [s for s in self._symbols.values() if s.is_non_terminal]

    def get_symbol(self, name: str) -> Symbol:
        return self._symbols[name]

    def productions_for_symbol(self, symbol: str | Symbol) -> typing.Sequence[Production]:
        if isinstance(symbol, Symbol):
            symbol = symbol.name
        return tuple(self._by_lhs.get(symbol, ()))

    def format(self) -> str:
        return "\n".join(f"{p.number}. {p.format()}" for p in self.productions)
