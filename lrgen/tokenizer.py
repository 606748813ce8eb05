import dataclasses
import logging
import typing

from .errors import UnrecognizedToken
from .grammar import EOF, Grammar, LexRule


tokenizer_log = logging.getLogger("lrgen.tokenizer")


@dataclasses.dataclass(frozen=True)
class Token:
    type: str
    value: str
    start: int
    end: int


def generic_tokenize(src: str, rules: typing.Sequence[LexRule]) -> typing.Iterator[Token]:
    """Scan `src` with the lex rules, in order, first match wins.

    This is not a DFA or anything clever; at each position we just try the
    rules' regular expressions one after the other. Skip rules (whitespace,
    usually) consume their text and produce nothing. The stream always ends
    with an EOF token.
    """
    pos = 0
    while pos < len(src):
        for rule in rules:
            matched = rule.match(src, pos)
            if matched is not None:
                break
        else:
            raise UnrecognizedToken(src[pos], pos)

        start = pos
        pos += len(matched)
        if rule.skip:
            continue

        assert rule.token is not None
        if rule.is_literal:
            kind = value = rule.token[1:-1]
        else:
            kind = rule.token
            value = matched

        if tokenizer_log.isEnabledFor(logging.DEBUG):
            tokenizer_log.debug(f"{kind} {value!r} [{start}, {pos})")
        yield Token(kind, value, start, pos)

    yield Token(EOF, EOF, pos, pos)


class Tokenizer:
    """Tokens for one string, using a grammar's lex rules (or a list of rules
    you hand it directly).

    `tokens()` is lazy, and every call starts again from the beginning of the
    string.
    """

    src: str
    rules: list[LexRule]

    def __init__(self, grammar: Grammar | typing.Sequence[LexRule], src: str):
        if isinstance(grammar, Grammar):
            self.rules = list(grammar.lex_rules)
        else:
            self.rules = list(grammar)
        self.src = src

    def tokens(self) -> typing.Iterator[Token]:
        return generic_tokenize(self.src, self.rules)

    def __iter__(self) -> typing.Iterator[Token]:
        return self.tokens()
