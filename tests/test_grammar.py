import pytest

from lrgen import (
    AUGMENTED_START,
    Grammar,
    GrammarError,
    LexRule,
    Symbol,
    SymbolKind,
)


def test_symbol_kinds():
    assert Symbol.from_string('"a"').is_terminal
    assert Symbol.from_string("'a'").is_terminal
    assert Symbol.from_string("NUMBER", tokens={"NUMBER"}).is_terminal
    assert Symbol.from_string("E").is_non_terminal
    assert Symbol.from_string("$").kind is SymbolKind.TERMINAL

    assert Symbol.from_string('"a"') == Symbol('"a"', SymbolKind.TERMINAL)
    assert Symbol.from_string('"a"').raw == "a"
    assert Symbol.from_string("E").raw == "E"


def test_productions_are_numbered():
    G = Grammar([("E", 'E "+" T'), ("E", "T"), ("T", '"id"')])

    assert [p.number for p in G.productions] == [0, 1, 2, 3]
    assert G.augmented_production is G.productions[0]
    assert G.augmented_production.is_augmented
    assert G.augmented_production.lhs.name == AUGMENTED_START
    assert G.augmented_production.rhs == (G.start_symbol,)
    assert not any(p.is_augmented for p in G.productions[1:])

    assert [p.format() for p in G.productions_for_symbol("E")] == ['E -> E "+" T', "E -> T"]
    assert G.productions_for_symbol(G.get_symbol("T")) == (G.productions[3],)
    assert G.productions_for_symbol('"+"') == ()
    assert G.productions_for_symbol("nope") == ()


def test_symbols_are_shared():
    G = Grammar([("E", 'E "+" T'), ("E", "T"), ("T", '"id"')])
    e_plus_t, e_t = G.productions_for_symbol("E")

    assert e_plus_t.lhs is e_plus_t.rhs[0]
    assert e_plus_t.rhs[2] is e_t.rhs[0]
    assert e_t.rhs[0] is G.productions_for_symbol("T")[0].lhs


def test_terminals_and_non_terminals():
    G = Grammar([("E", 'E "+" T'), ("E", "T"), ("T", "NUMBER")], tokens=["NUMBER"])

    assert [s.name for s in G.terminals] == ['"+"', "NUMBER"]
    assert [s.name for s in G.non_terminals] == ["E", AUGMENTED_START, "T"]


def test_rhs_forms():
    G = Grammar(
        [
            ("S", ["A", '"x y"']),
            ("S", 'A "x y"'),
            ("A", []),
            ("A", "ε"),
            ("A", ""),
        ]
    )
    first, second = G.productions_for_symbol("S")
    assert first.rhs == second.rhs
    assert [s.name for s in first.rhs] == ["A", '"x y"']
    assert all(p.is_epsilon for p in G.productions_for_symbol("A"))
    assert G.productions_for_symbol("A")[0].format() == "A -> ε"


def test_explicit_start():
    G = Grammar([("A", '"a"'), ("S", "A")], start="S")
    assert G.start_symbol.name == "S"
    assert G.augmented_production.format() == "$accept -> S"


def test_bad_grammars():
    with pytest.raises(GrammarError):
        Grammar([])

    with pytest.raises(GrammarError):
        Grammar([("S", '"a" $')])

    with pytest.raises(GrammarError):
        Grammar([("$accept", '"a"')])

    with pytest.raises(GrammarError):
        Grammar([("S", '"a"')], start="T")

    with pytest.raises(GrammarError):
        Grammar([("S", '"a"'), ('"a"', '"b"')])

    # Bad grammars are bad values, too.
    with pytest.raises(ValueError):
        Grammar([])


def test_literal_lex_rules():
    G = Grammar([("S", '"=" S'), ("S", '"==" "id"')])

    assert [rule.token for rule in G.lex_rules] == ['"=="', '"id"', '"="']
    assert all(rule.is_literal for rule in G.lex_rules)
    assert G.lex_rules[0].match("a==b", 1) == "=="


def test_lex_rule_tokens_are_terminals():
    G = Grammar(
        [("E", 'E "+" NUMBER'), ("E", "NUMBER")],
        lex=[LexRule(r"\d+", "NUMBER"), LexRule(r"\+", '"+"')],
    )
    assert G.get_symbol("NUMBER").is_terminal


def test_lex_rule_needs_token():
    with pytest.raises(GrammarError):
        LexRule(r"\s+")

    rule = LexRule(r"\s+", skip=True)
    assert rule.skip
    assert rule.match("a  b", 1) == "  "
    assert rule.match("a  b", 0) is None


def test_from_dict():
    G = Grammar.from_dict(
        {
            "lex": [[r"\s+", None], [r"\d+", "NUMBER"], [r"\+", '"+"']],
            "bnf": {
                "E": ['E "+" NUMBER', "NUMBER"],
                "O": "ε",
            },
        }
    )

    assert G.start_symbol.name == "E"
    assert [p.format() for p in G.productions] == [
        "$accept -> E",
        'E -> E "+" NUMBER',
        "E -> NUMBER",
        "O -> ε",
    ]
    assert G.get_symbol("NUMBER").is_terminal
    assert [rule.skip for rule in G.lex_rules] == [True, False, False]


def test_from_dict_needs_bnf():
    with pytest.raises(GrammarError):
        Grammar.from_dict({"lex": []})


def test_format():
    G = Grammar([("S", 'S "a"'), ("S", '"b"')])
    assert G.format() == '0. $accept -> S\n1. S -> S "a"\n2. S -> "b"'
