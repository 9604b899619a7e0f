"""This module represents the implementation of the Name Prefix Tree (NPT),
a 26-ary trie used for storing case-insensitive alphabetic names.
"""

from collections.abc import Iterator
from typing import Optional, Protocol

ALPHABET_SIZE = 26


class NamePrefixTreeError(Exception):
    """Base class for the errors raised by the Name Prefix Tree."""


class InvalidCharacterError(NamePrefixTreeError, ValueError):
    """Raised when a name contains a character that isn't an ASCII letter."""

    def __init__(self, name: str, character: Optional[str]) -> None:
        """Initialize the error.

        Args:
            name (str): The rejected name.
            character (Optional[str]): The offending character, or None
            if the name is empty.

        """
        self.name = name
        self.character = character
        if character is None:
            message = "Invalid name: names must contain at least one letter."
        else:
            message = f"Invalid character in name '{name}': '{character}'"
        super().__init__(message)


class NameNotFoundError(NamePrefixTreeError, KeyError):
    """Raised when deleting a name that isn't stored in the tree."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Node '{name}' not found for deletion.")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class LetterCounter(Protocol):
    """Anything that can count the letters traversed by a lookup."""

    def bump(self, letter_index: int) -> None: ...


def char_to_index(char: str) -> int:
    """Map an ASCII letter (either case) to its child slot.

    Args:
        char (str): A single character.

    Returns:
        int: The slot index in the range 0-25, or -1 if `char` isn't
        an ASCII letter.

    """
    if "a" <= char <= "z":
        return ord(char) - ord("a")
    if "A" <= char <= "Z":
        return ord(char) - ord("A")
    return -1


def index_to_char(index: int) -> str:
    """Return the lowercase letter stored at child slot `index`."""
    return chr(ord("a") + index)


class TrieNode:
    """Represent a node in the name prefix tree."""

    def __init__(self) -> None:
        """Initialize a new tree node.

        Attributes:
            name (Optional[str]): The original spelling of the name that
            ends at this node, or None if no name ends here.
            children (list): Exactly 26 slots, one per letter, each holding
            a child TrieNode or None.

        """
        self.name: Optional[str] = None
        self.children: list[Optional[TrieNode]] = [None] * ALPHABET_SIZE

    def has_children(self) -> bool:
        """Return True if at least one child slot is occupied."""
        return any(child is not None for child in self.children)

    def is_dead(self) -> bool:
        """Return True if the node neither stores a name nor leads to one."""
        return self.name is None and not self.has_children()


class NamePrefixTree:
    """Represents the name prefix tree data structure."""

    def __init__(self) -> None:
        """Initialize the root node of the tree."""
        self.root = TrieNode()

    @staticmethod
    def _indices(name: str) -> Optional[list[int]]:
        """Return the child slots spelling `name`, or None if any character
        isn't a letter.
        """
        indices = []
        for char in name:
            index = char_to_index(char)
            if index == -1:
                return None
            indices.append(index)
        return indices

    def insert(self, name: str) -> None:
        """Insert a name into the tree.

        The whole name is validated before any node is created, so a
        rejected name leaves the tree untouched.

        Args:
            name (str): The name to store. Its original spelling is kept
            on the terminal node; the path is case-folded.

        Raises:
            InvalidCharacterError: If `name` is empty or contains a
            character that isn't an ASCII letter.

        """
        if not name:
            raise InvalidCharacterError(name, None)

        for char in name:
            if char_to_index(char) == -1:
                raise InvalidCharacterError(name, char)

        node = self.root
        for char in name:
            index = char_to_index(char)
            child = node.children[index]
            # Create the missing child lazily
            if child is None:
                child = TrieNode()
                node.children[index] = child
            node = child
        # Re-inserting overwrites the stored spelling
        node.name = name

    def lookup(
        self,
        name: str,
        stats: Optional[LetterCounter] = None,
    ) -> bool:
        """Check for the existence of a name in the tree.

        Args:
            name (str): The name to look for (case-insensitive).
            stats (Optional[LetterCounter]): If given, bumped once for every
            letter successfully traversed, even when the walk ends on a node
            without a name.

        Returns:
            bool: True only if a name ends exactly at the final node.

        """
        node = self.root
        for char in name:
            index = char_to_index(char)
            if index == -1:
                return False
            child = node.children[index]
            if child is None:
                return False
            node = child
            if stats is not None:
                stats.bump(index)
        return node.name is not None

    def delete(self, name: str) -> None:
        """Delete a name from the tree.

        If other names extend through the target node only its name is
        cleared. Otherwise the node is unlinked, along with every ancestor
        left without a name or children. The root is never unlinked.

        Args:
            name (str): The name to delete (case-insensitive).

        Raises:
            NameNotFoundError: If the name isn't stored. The tree is not
            modified in that case.

        """
        indices = self._indices(name)
        if indices is None:
            raise NameNotFoundError(name)

        path = [self.root]
        for index in indices:
            child = path[-1].children[index]
            if child is None:
                raise NameNotFoundError(name)
            path.append(child)

        target = path[-1]
        if target.name is None:
            raise NameNotFoundError(name)
        target.name = None

        # Prune upward while nodes are dead
        depth = len(path) - 1
        while depth > 0 and path[depth].is_dead():
            path[depth - 1].children[indices[depth - 1]] = None
            depth -= 1

    def traverse_ordered(
        self,
    ) -> Iterator[tuple[str, Optional[str], int]]:
        """Yield every node below the root in a to z, depth-first pre-order.

        Yields:
            tuple[str, Optional[str], int]: The edge letter, the stored name
            (or None) and the depth, starting at 0 for the root's children.

        """
        stack: list[tuple[int, TrieNode, int]] = []

        def push_children(node: TrieNode, depth: int) -> None:
            # Reversed so that 'a' is popped first
            for index in range(ALPHABET_SIZE - 1, -1, -1):
                child = node.children[index]
                if child is not None:
                    stack.append((index, child, depth))

        push_children(self.root, 0)
        while stack:
            index, node, depth = stack.pop()
            yield index_to_char(index), node.name, depth
            push_children(node, depth + 1)

    def names(self) -> Iterator[str]:
        """Yield every stored name in traversal order."""
        for _letter, name, _depth in self.traverse_ordered():
            if name is not None:
                yield name

    def count_nodes(self) -> int:
        """Return the number of nodes, root included."""
        total = 0
        stack = [self.root]
        while stack:
            node = stack.pop()
            total += 1
            stack.extend(
                child for child in node.children if child is not None
            )
        return total

    def is_empty(self) -> bool:
        """Return True if no name is stored."""
        return self.root.is_dead()

    def teardown(self) -> None:
        """Release every node, leaving an empty but usable tree."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            stack.extend(
                child for child in node.children if child is not None
            )
            node.children = [None] * ALPHABET_SIZE
            node.name = None
        self.root = TrieNode()


def create_trie() -> NamePrefixTree:
    """Create an empty name prefix tree."""
    return NamePrefixTree()


def insert(tree: NamePrefixTree, name: str) -> None:
    """Insert `name` into `tree`; raises InvalidCharacterError."""
    tree.insert(name)


def lookup(
    tree: NamePrefixTree,
    name: str,
    stats: Optional[LetterCounter] = None,
) -> bool:
    """Look `name` up in `tree`, bumping `stats` on the way."""
    return tree.lookup(name, stats)


def delete(tree: NamePrefixTree, name: str) -> None:
    """Delete `name` from `tree`; raises NameNotFoundError."""
    tree.delete(name)


def traverse_ordered(
    tree: NamePrefixTree,
) -> Iterator[tuple[str, Optional[str], int]]:
    """Return a fresh ordered traversal of `tree`."""
    return tree.traverse_ordered()


def teardown(tree: NamePrefixTree) -> None:
    """Release every node of `tree`."""
    tree.teardown()
