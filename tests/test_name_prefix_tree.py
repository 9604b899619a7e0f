import pytest

from src.custom_data_structures.AccessStats.AccessStats import AccessStats
from src.custom_data_structures.NamePrefixTree import NamePrefixTree as npt
from src.custom_data_structures.NamePrefixTree.NamePrefixTree import (
    InvalidCharacterError,
    NameNotFoundError,
    NamePrefixTree,
    char_to_index,
)

NAMES = ["Ann", "anne", "Bob", "bobby", "Carol", "dave", "Z"]


@pytest.fixture
def tree():
    return NamePrefixTree()


@pytest.fixture
def filled_tree(tree):
    for name in NAMES:
        tree.insert(name)
    return tree


def snapshot(tree):
    return list(tree.traverse_ordered())


@pytest.mark.parametrize(
    "char, expected",
    [("a", 0), ("z", 25), ("A", 0), ("Q", 16), ("1", -1), ("-", -1), ("é", -1)],
)
def test_char_to_index(char, expected):
    assert char_to_index(char) == expected


def test_new_tree_is_empty(tree):
    assert tree.root.name is None
    assert tree.root.children == [None] * 26
    assert tree.is_empty()
    assert snapshot(tree) == []
    assert tree.count_nodes() == 1


@pytest.mark.parametrize("name", NAMES)
def test_lookup_after_insert(filled_tree, name):
    assert filled_tree.lookup(name) is True


def test_lookup_is_case_insensitive(tree):
    tree.insert("Ann")
    assert tree.lookup("ANN") is True
    assert tree.lookup("ann") is True
    assert tree.lookup("aNn") is True


def test_insert_keeps_original_spelling(tree):
    tree.insert("McDonald")
    assert list(tree.names()) == ["McDonald"]


def test_reinsert_overwrites_spelling_without_new_nodes(tree):
    tree.insert("ann")
    nodes = tree.count_nodes()

    tree.insert("ANN")

    assert tree.count_nodes() == nodes
    assert list(tree.names()) == ["ANN"]
    assert tree.lookup("ann") is True


def test_prefix_without_name_is_not_found(filled_tree):
    assert filled_tree.lookup("bo") is False
    assert filled_tree.lookup("an") is False


def test_lookup_missing_names(filled_tree):
    assert filled_tree.lookup("annabel") is False
    assert filled_tree.lookup("xavier") is False
    assert filled_tree.lookup("") is False


def test_lookup_non_letter_returns_false(filled_tree):
    assert filled_tree.lookup("bob1") is False
    assert filled_tree.lookup("b-ob") is False


@pytest.mark.parametrize("name", ["jo3", "a b", "Zoë", "o'neil", "-"])
def test_insert_invalid_character_raises(tree, name):
    with pytest.raises(InvalidCharacterError) as excinfo:
        tree.insert(name)
    assert excinfo.value.name == name
    assert excinfo.value.character is not None
    assert tree.lookup(name) is False


def test_insert_invalid_character_creates_no_nodes(tree):
    with pytest.raises(InvalidCharacterError) as excinfo:
        tree.insert("abc1def")

    assert excinfo.value.character == "1"
    assert tree.count_nodes() == 1
    assert tree.lookup("abc") is False
    assert snapshot(tree) == []


def test_insert_empty_name_raises(tree):
    with pytest.raises(InvalidCharacterError) as excinfo:
        tree.insert("")
    assert excinfo.value.character is None
    assert tree.lookup("") is False


def test_invalid_character_error_is_a_value_error(tree):
    with pytest.raises(ValueError):
        tree.insert("4ever")


def test_delete_leaf_name(tree):
    tree.insert("ann")
    tree.delete("ann")
    assert tree.lookup("ann") is False


def test_delete_leaf_prunes_dead_ancestors(tree):
    tree.insert("abc")
    tree.delete("ABC")

    assert tree.is_empty()
    assert tree.count_nodes() == 1
    assert snapshot(tree) == []


def test_delete_stops_pruning_at_named_ancestor(tree):
    tree.insert("ann")
    tree.insert("annie")
    tree.delete("annie")

    assert tree.lookup("ann") is True
    assert tree.lookup("annie") is False
    assert [letter for letter, _, _ in snapshot(tree)] == ["a", "n", "n"]


def test_delete_prefix_keeps_extension(tree):
    tree.insert("ann")
    tree.insert("anne")

    tree.delete("ann")

    assert tree.lookup("anne") is True
    assert tree.lookup("ann") is False
    # The node is kept because "anne" runs through it
    assert tree.count_nodes() == 5


def test_delete_unknown_name_raises_and_keeps_tree(filled_tree):
    before = snapshot(filled_tree)

    for name in ["xavier", "annabel", "bo", "", "b0b"]:
        with pytest.raises(NameNotFoundError) as excinfo:
            filled_tree.delete(name)
        assert excinfo.value.name == name

    assert snapshot(filled_tree) == before


def test_delete_twice_raises(tree):
    tree.insert("bob")
    tree.delete("bob")
    with pytest.raises(NameNotFoundError):
        tree.delete("bob")


def test_not_found_message(tree):
    with pytest.raises(NameNotFoundError) as excinfo:
        tree.delete("ghost")
    assert str(excinfo.value) == "Node 'ghost' not found for deletion."


def test_single_letter_name_delete_keeps_root(tree):
    tree.insert("Z")
    root = tree.root

    tree.delete("z")

    assert tree.root is root
    assert tree.is_empty()


def test_bob_scenario(tree):
    for name in ["Bob", "bobby", "Ann"]:
        tree.insert(name)

    assert tree.lookup("bob") is True
    assert tree.lookup("bo") is False
    assert tree.lookup("bobby") is True

    tree.delete("bob")

    assert tree.lookup("bob") is False
    assert tree.lookup("bobby") is True
    assert tree.lookup("ann") is True


def test_traverse_ordered_is_alphabetical_preorder(tree):
    for name in ["bob", "Ann", "al"]:
        tree.insert(name)

    assert snapshot(tree) == [
        ("a", None, 0),
        ("l", "al", 1),
        ("n", None, 1),
        ("n", "Ann", 2),
        ("b", None, 0),
        ("o", None, 1),
        ("b", "bob", 2),
    ]


def test_traverse_ordered_is_lazy_and_restartable(filled_tree):
    first = filled_tree.traverse_ordered()
    assert next(first) == ("a", None, 0)

    assert snapshot(filled_tree) == snapshot(filled_tree)
    assert next(first) == ("n", None, 1)


def test_names_in_alphabetical_order(filled_tree):
    assert list(filled_tree.names()) == [
        "Ann",
        "anne",
        "Bob",
        "bobby",
        "Carol",
        "dave",
        "Z",
    ]


def test_teardown_releases_everything(filled_tree):
    old_root = filled_tree.root

    filled_tree.teardown()

    assert filled_tree.is_empty()
    assert filled_tree.count_nodes() == 1
    assert old_root.children == [None] * 26
    for name in NAMES:
        assert filled_tree.lookup(name) is False


def test_teardown_on_empty_tree(tree):
    tree.teardown()
    tree.teardown()
    assert tree.is_empty()


def test_tree_usable_after_teardown(filled_tree):
    filled_tree.teardown()
    filled_tree.insert("Eve")
    assert filled_tree.lookup("eve") is True


class TestLookupStatistics:
    def test_full_match_bumps_every_letter(self, tree):
        stats = AccessStats()
        tree.insert("abc")

        assert tree.lookup("abc", stats) is True

        values = dict(stats.snapshot())
        assert values["a"] == pytest.approx(0.6)
        assert values["b"] == pytest.approx(0.6)
        assert values["c"] == pytest.approx(0.6)
        assert values["d"] == pytest.approx(0.5)
        assert stats.average() == pytest.approx(0.5 + 0.3 / 26)

    def test_partial_path_bumps_only_traversed_prefix(self, tree):
        stats = AccessStats()
        tree.insert("bob")

        assert tree.lookup("bon", stats) is False

        values = dict(stats.snapshot())
        assert values["b"] == pytest.approx(0.6)
        assert values["o"] == pytest.approx(0.6)
        assert values["n"] == pytest.approx(0.5)

    def test_prefix_without_name_still_bumps(self, tree):
        stats = AccessStats()
        tree.insert("bobby")

        assert tree.lookup("bob", stats) is False

        assert stats.get("b") == pytest.approx(0.7)
        assert stats.get("o") == pytest.approx(0.6)

    def test_repeated_letters_bump_repeatedly(self, tree):
        stats = AccessStats()
        tree.insert("anna")

        tree.lookup("anna", stats)

        assert stats.get("a") == pytest.approx(0.7)
        assert stats.get("n") == pytest.approx(0.7)

    def test_non_letter_stops_bumping(self, tree):
        stats = AccessStats()
        tree.insert("ab")

        assert tree.lookup("a1b", stats) is False

        assert stats.get("a") == pytest.approx(0.6)
        assert stats.get("b") == pytest.approx(0.5)

    def test_missing_first_letter_bumps_nothing(self, tree):
        stats = AccessStats()
        assert tree.lookup("zed", stats) is False
        assert stats.average() == pytest.approx(0.5)

    def test_delete_does_not_touch_statistics(self, tree):
        stats = AccessStats()
        tree.insert("ann")
        tree.delete("ann")
        assert stats.average() == pytest.approx(0.5)


def test_module_level_interface():
    tree = npt.create_trie()
    npt.insert(tree, "Ann")
    npt.insert(tree, "anne")

    assert npt.lookup(tree, "ANN") is True
    npt.delete(tree, "ann")
    assert npt.lookup(tree, "ann") is False
    assert list(npt.traverse_ordered(tree))[-1] == ("e", "anne", 3)

    with pytest.raises(InvalidCharacterError):
        npt.insert(tree, "ann3")
    with pytest.raises(NameNotFoundError):
        npt.delete(tree, "ann")

    npt.teardown(tree)
    assert tree.is_empty()
