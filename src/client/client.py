"""Handles the connection to the Name Prefix Tree server."""

import asyncio
import ssl
import time
from typing import Optional, Union

RESPONSE_TERMINATOR = b"\n.\n"


class Client:
    """Asynchronous Client for connecting to a TCP server."""

    def __init__(self, ip: str, port: int):
        """Initialize a new asynchronous client instance.

        Args:
            ip (str): The IP address of the server to connect to.
            port (int): The port number of the server to connect to.

        """
        self.ip = ip
        self.port = port
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.last_response: Optional[str] = None

    def _ssl_options(self) -> dict[str, Union[ssl.SSLContext, str]]:
        """Return the extra `open_connection` arguments; none for plain TCP."""
        return {}

    async def connect(self) -> None:
        """Establish the asynchronous connection to the server.

        This method must be called and awaited before sending any commands.

        Raises:
            ConnectionRefusedError: If the server actively
            refuses the connection.
            Exception: For other connection-related errors.

        """
        try:
            self.reader, self.writer = await asyncio.open_connection(
                self.ip,
                self.port,
                **self._ssl_options(),
            )
            peername = self.writer.get_extra_info("peername")
            print(f"Connected to server at {peername[0]}:{peername[1]}")

        except ConnectionRefusedError:
            print(
                f"Connection refused by the server at {self.ip}:{self.port}.",
            )
            raise

        except Exception as e:
            print(f"Error connecting to server at {self.ip}:{self.port}: {e}")
            raise

    async def send_message(self, command: str) -> Union[float, None]:
        """Send one command line and wait for its complete response.

        The response is kept in `last_response`.

        Args:
            command (str): The command line, e.g. "LOOKUP Ann".

        Returns:
            float: The roundtrip time in milliseconds.
            None: If there is any error, or if the client is not connected.

        """
        if self.writer is None or self.reader is None:
            print("Client not connected. Call .connect() first.")
            return None

        try:
            start = time.perf_counter()

            self.writer.write((command.strip() + "\n").encode("utf-8"))
            await self.writer.drain()

            try:
                data = await self.reader.readuntil(RESPONSE_TERMINATOR)
            except asyncio.IncompleteReadError:
                print(
                    "Server closed the connection unexpectedly or sent "
                    "no data.",
                )
                return None

            response = data[: -len(RESPONSE_TERMINATOR)].decode("utf-8")
            self.last_response = response

            end = time.perf_counter()
            elapsed_time = (end - start) * 1000

            print(f"Time: {elapsed_time:.2f} ms")
            print("Response from server:", response)

            return elapsed_time

        except (ConnectionResetError, BrokenPipeError) as e:
            print("Server closed the connection unexpectedly or sent no data.")
            raise e
        except OSError as e:
            print(f"OS Error during send: {e}")
            raise e
        except Exception as e:
            print(f"An unexpected error occurred during send: {e}")
            raise e

    async def request(self, command: str) -> Optional[str]:
        """Send a command and return the server's response text.

        Args:
            command (str): The command line.

        Returns:
            Optional[str]: The response, or None if nothing was received.

        """
        if await self.send_message(command) is None:
            return None
        return self.last_response

    async def close(self) -> None:
        """Close the asynchronous connection to the server."""
        print("Closing connection...")
        if self.writer and not self.writer.is_closing():
            try:
                self.writer.close()
                await self.writer.wait_closed()
                print("Connection closed.")
            except (ConnectionResetError, BrokenPipeError, OSError) as e:
                print(f"Error during close cleanup: {e}")
                raise
            finally:
                self.reader = None
                self.writer = None
        elif self.writer and self.writer.is_closing():
            try:
                await self.writer.wait_closed()
                print("Connection already closing, waited for it.")
            except (ConnectionResetError, BrokenPipeError, OSError) as e:
                print(f"Error during close cleanup (already closing): {e}")
                raise
        else:
            print("No active connection to close.")
        self.reader = None
        self.writer = None
