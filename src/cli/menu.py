"""Interactive console menu over a local Name Prefix Tree session."""

import logging
from typing import Callable, Optional

from src.server.session import (
    NAME_COMMANDS,
    Command,
    NameTreeSession,
    RequestParsingError,
    parse_command,
    render_menu,
)

PROMPTS = {
    Command.INSERT: "Enter name to insert: ",
    Command.LOOKUP: "Enter name to lookup: ",
    Command.DELETE: "Enter name to delete: ",
}


def run_menu(
    session: NameTreeSession,
    read: Optional[Callable[[str], str]] = None,
    write: Optional[Callable[[str], None]] = None,
) -> None:
    """Run the menu loop until the user exits or input ends.

    The session is closed on the way out.

    Args:
        session (NameTreeSession): The session to operate on.
        read (Optional[Callable]): Prompts for and returns one line of
        input. Defaults to `input`.
        write (Optional[Callable]): Shows one block of output. Defaults
        to `print`.

    """
    read = read or input
    write = write or print
    try:
        while True:
            write("\n" + render_menu())
            try:
                choice = read("Enter your choice: ")
            except EOFError:
                break

            try:
                command = parse_command(choice)
            except RequestParsingError:
                write("Invalid choice. Please try again.")
                continue

            name = None
            if command in NAME_COMMANDS:
                try:
                    # Only the first token is used as the name
                    tokens = read(PROMPTS[command]).split()
                except EOFError:
                    break
                if not tokens:
                    write("No name entered.")
                    continue
                name = tokens[0]

            write(session.execute(command, name))
            if command == Command.EXIT:
                break
    finally:
        session.close()
        logging.info("Menu session closed.")
