"""SSL-enabled version of the client."""

import ssl
import sys
from pathlib import Path
from typing import Union

from src.server.ssl_utils import create_client_ssl_context

from .client import Client


class SslClient(Client):
    """Asynchronous SSL Client for connecting to a secure TCP server."""

    def __init__(self, ip: str, port: int, cafile_path: Path):
        """Initialize a new asynchronous SSL client instance.

        Args:
            ip (str): The IP address of the server to connect to.
            port (int): The port number of the server to connect to.
            cafile_path (Path): The file path to the CA certificate.

        """
        super().__init__(ip, port)
        self.cafile_path = cafile_path

        try:
            self.ssl_context = create_client_ssl_context(self.cafile_path)
        except FileNotFoundError:
            print(
                "Error: CA certificate file not found at "
                f"{self.cafile_path}. SSL verification might fail.",
            )
            self.ssl_context = ssl.create_default_context(
                ssl.Purpose.SERVER_AUTH,
            )
            self.ssl_context.check_hostname = False
        except ssl.SSLError as e:
            print(
                f"Error loading CA certificate from {self.cafile_path}: {e}",
                file=sys.stderr,
            )
            self.ssl_context = ssl.create_default_context(
                ssl.Purpose.SERVER_AUTH,
            )
            self.ssl_context.check_hostname = False

    def _ssl_options(self) -> dict[str, Union[ssl.SSLContext, str]]:
        """Return the TLS arguments for `open_connection`."""
        return {"ssl": self.ssl_context, "server_hostname": self.ip}

    async def connect(self) -> None:
        """Establish the asynchronous SSL connection to the server.

        Raises:
            ConnectionRefusedError: If the server
            actively refuses the connection.
            ssl.SSLError: If there's an SSL/TLS handshake
            or certificate verification error.
            Exception: For other connection-related errors.

        """
        try:
            await super().connect()
        except ssl.SSLError as e:
            print(
                f"SSL/TLS error during connection to "
                f"{self.ip}:{self.port}: {e}",
            )
            raise
