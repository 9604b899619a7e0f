"""Configuration parser for the server."""

from pathlib import Path
from typing import cast


class ConfigBoolParsingError(Exception):
    """Raised when the parsing of bool strings in
    the config file was not successful.
    """


class ConfigNotFoundError(Exception):
    """Raised when any of the configuration settings is not provided."""


class ServerConfig:
    """A class to save server configuration settings."""

    def __init__(
        self,
        names_path: Path,
        port: int,
        use_ssl: bool,
        save_on_exit: bool,
    ) -> None:
        """Initialize the server configuration.

        Args:
            names_path (Path): The file the names are loaded from
            and saved to.
            port (int): The port number the server will listen to.
            use_ssl (bool): Whether the server should use SSL.
            save_on_exit (bool): Whether to save the names on shutdown.

        """
        self.names_path = names_path
        self.port = port
        self.use_ssl = use_ssl
        self.save_on_exit = save_on_exit

    def __repr__(self) -> str:
        """Return a string representation of the configuration object.

        Returns:
            str: A formatted string representing the configuration settings.

        """
        return f"""
                Server configuration settings:
                Names path: {self.names_path}
                Save on exit: {"YES" if self.save_on_exit else "NO"}
                SSL enabled: {"YES" if self.use_ssl else "NO"}
                Used port number: {self.port}
            """


def parse_bool(key: str, val: str) -> bool:
    """Parse given values into boolean ones (True or False).

    Args:
        key (str): The key to parse the boolean for.
        val (str): The value to be parsed to boolean.

    Raises:
        ConfigBoolParsingError: If an error occured
        while parsing the value to boolean.

    Returns:
        bool: True or False depending on the output of the parser.

    """
    if val.strip().lower() in {"true", "1", "yes"}:
        return True
    if val.strip().lower() in {"false", "0", "no"}:
        return False

    raise ConfigBoolParsingError(
        f"Invalid boolean value for key '{key}' in the configuration file. "
        "Expected 'true', 'false', '1', '0', 'yes', or 'no' "
        "(case-insensitive).",
    )


def load_config_file(config_file_path: Path) -> ServerConfig:
    """Load and parse the configuration file.

    Args:
        config_file_path (Path): Path to the config file.

    Raises:
        ConfigNotFoundError: If required settings are missing.
        FileNotFoundError: If the config file or the directory of the
        names file does not exist.
        ValueError: If the port isn't an integer.

    Returns:
        ServerConfig: Parsed config object.

    """
    if not config_file_path.exists():
        raise FileNotFoundError(
            f"Missing required configuration file: '{config_file_path}'. "
            "Please ensure the file exists and the path is correct.",
        )

    names_path = port = use_ssl = save_on_exit = None

    with config_file_path.open("r", encoding="utf-8") as file:
        for line in file:
            line = line.strip()

            # Skip blank lines and comments
            if not line or line.startswith("#"):
                continue

            key, sep, value = line.partition("=")
            if sep != "=":
                continue

            key = key.strip().lower()
            value = value.strip()

            if key == "namespath":
                names_path = Path(value)
            elif key == "save_on_exit":
                save_on_exit = parse_bool("save_on_exit", value)
            elif key == "use_ssl":
                use_ssl = parse_bool("use_ssl", value)
            elif key == "port":
                port = int(value)

    required = {
        "names_path": names_path,
        "port": port,
        "use_ssl": use_ssl,
        "save_on_exit": save_on_exit,
    }

    for key, val in required.items():
        if val is None:
            raise ConfigNotFoundError(
                f"Missing required configuration: '{key}'. "
                "Please ensure the config file includes a valid line for "
                f"'{'namespath' if key == 'names_path' else key}'.",
            )

    # The names file itself may be created on the first save
    if names_path is not None and not names_path.parent.exists():
        raise FileNotFoundError(
            f"The directory of the names file {names_path} doesn't exist.",
        )

    return ServerConfig(
        cast("Path", names_path),
        cast("int", port),
        cast("bool", use_ssl),
        cast("bool", save_on_exit),
    )
