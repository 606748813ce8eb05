import pytest

from lrgen import CanonicalCollection, Grammar, InvalidOperation, LRItem


def _left_recursive() -> Grammar:
    return Grammar([("S", 'S "a"'), ("S", '"b"')])


def test_item_attributes():
    G = _left_recursive()
    production = G.productions[1]  # S -> S "a"

    start = LRItem(production, 0)
    assert start.current_symbol is not None
    assert start.current_symbol.name == "S"
    assert start.should_closure
    assert not start.is_final
    assert start.key == (1, 0)
    assert [s.name for s in start.next_symbols] == ["S", '"a"']

    middle = LRItem(production, 1)
    assert middle.current_symbol is not None
    assert middle.current_symbol.name == '"a"'
    assert not middle.should_closure
    assert not middle.is_final

    end = LRItem(production, 2)
    assert end.current_symbol is None
    assert end.is_final
    assert not end.should_closure
    assert end.next_symbols == ()


def test_item_format():
    G = _left_recursive()
    assert LRItem(G.productions[1], 1).format() == 'S -> S • "a"'
    assert LRItem(G.productions[1], 2).format() == 'S -> S "a" •'
    assert LRItem(G.augmented_production, 0).format() == "$accept -> • S"


def test_epsilon_item_is_final_at_zero():
    G = Grammar([("S", 'A "b"'), ("A", [])])
    item = LRItem(G.productions_for_symbol("A")[0], 0)
    assert item.is_final
    assert item.format() == "A -> •"


def test_dot_out_of_range():
    G = _left_recursive()
    with pytest.raises(ValueError):
        LRItem(G.productions[2], 2)
    with pytest.raises(ValueError):
        LRItem(G.productions[2], -1)


def test_goto_records_transition():
    G = _left_recursive()
    collection = CanonicalCollection(G)
    state, is_new = collection.state_for_kernel([collection.item_for(G.augmented_production, 0)])
    assert is_new

    item = state.items[1]
    assert item.format() == 'S -> • S "a"'

    advanced = item.goto(state)
    assert advanced is collection.get_item_for_key((1, 1))
    assert advanced.dot_position == 1

    transition = state.get_transition_on_symbol("S")
    assert transition is not None
    assert transition.items == [item]
    assert transition.kernel == [advanced]
    assert transition.state is None


def test_goto_reuses_registered_item():
    G = _left_recursive()
    collection = CanonicalCollection.from_grammar(G)

    before = collection.item_count
    item = collection.get_item_for_key((1, 0))
    advanced = item.goto(collection.start_state)

    assert advanced is collection.get_item_for_key((1, 1))
    assert collection.item_count == before


def test_goto_on_final_item_fails():
    G = _left_recursive()
    collection = CanonicalCollection.from_grammar(G)
    final = collection.get_item_for_key((2, 1))
    assert final.is_final

    with pytest.raises(InvalidOperation):
        final.goto(collection.start_state)
