from unittest.mock import patch

import pytest

from src.cli.menu import run_menu
from src.server.session import NameTreeSession


class ScriptedConsole:
    """Feeds prepared answers to the menu and records what it shows."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []
        self.output = []

    def read(self, prompt):
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)

    def write(self, text):
        self.output.append(text)


@pytest.fixture
def session(tmp_path):
    return NameTreeSession(tmp_path / "npt_output.txt")


def test_insert_lookup_and_exit(session):
    console = ScriptedConsole(["1", "Ann", "2", "ANN", "8"])

    run_menu(session, console.read, console.write)

    assert "Name 'Ann' inserted successfully." in console.output
    assert "Lookup result for 'ANN': Found" in console.output
    assert console.output[-1] == "Goodbye."
    assert console.prompts[1] == "Enter name to insert: "
    assert console.prompts[3] == "Enter name to lookup: "
    assert session.closed is True


def test_invalid_choice_is_reported(session):
    console = ScriptedConsole(["9", "abc", "8"])

    run_menu(session, console.read, console.write)

    assert console.output.count("Invalid choice. Please try again.") == 2


def test_only_first_token_is_used_as_name(session):
    console = ScriptedConsole(["1", "Mary Ann", "4", "8"])

    run_menu(session, console.read, console.write)

    assert "Name 'Mary' inserted successfully." in console.output
    tree_listing = next(
        text for text in console.output if text.startswith("Name Prefix")
    )
    assert "(Mary)" in tree_listing
    assert "(Ann)" not in tree_listing


def test_blank_name_is_rejected(session):
    console = ScriptedConsole(["3", "   ", "8"])

    run_menu(session, console.read, console.write)

    assert "No name entered." in console.output


def test_save_then_reload(session):
    console = ScriptedConsole(["1", "Zed", "1", "amy", "7", "8"])

    run_menu(session, console.read, console.write)

    assert (
        "Name Prefix Tree (NPT) saved to file successfully." in console.output
    )
    reloaded = NameTreeSession(session.names_path)
    assert reloaded.load() == 2


def test_end_of_input_closes_session(session):
    console = ScriptedConsole(["1"])

    run_menu(session, console.read, console.write)

    assert session.closed is True


def test_menu_shown_before_every_choice(session):
    console = ScriptedConsole(["6", "8"])

    run_menu(session, console.read, console.write)

    menus = [text for text in console.output if text.startswith("\nMenu:")]
    assert len(menus) == 2
    assert "Average Access Probability: 0.50" in console.output


def test_defaults_to_console(session):
    with (
        patch("builtins.input", side_effect=["5", "8"]) as mock_input,
        patch("builtins.print") as mock_print,
    ):
        run_menu(session)

    mock_input.assert_any_call("Enter your choice: ")
    mock_print.assert_any_call("Goodbye.")
