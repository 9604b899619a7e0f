import asyncio
import gc
import socket
import ssl
import sys
import time
import weakref
from datetime import datetime
from pathlib import Path
from typing import Union

from .config import load_config_file
from .logger import (
    log,
    setup_logging_queue,
    setup_process_logging,
    start_logging_listener,
    stop_logging_listener,
)
from .session import (
    Command,
    NameTreeSession,
    RequestParsingError,
    parse_request,
)
from .ssl_utils import create_server_ssl_context, generate_certificate_and_key

MAX_CHUNK_SIZE = 1024  # Maximum request line
RESPONSE_TERMINATOR = "\n.\n"


def get_local_ip() -> str:
    """Return the local network address of this machine.

    Returns:
        str: The local IP address as a string.

    """
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        s.connect(("8.8.8.8", 80))
        return str(s.getsockname()[0])


def resolve_ip(choice: str) -> str:
    """Map an --ip choice ("local", "public" or "loopback") to the
    address to bind.
    """
    if choice == "public":
        return "0.0.0.0"
    if choice == "loopback":
        return "127.0.0.1"
    return get_local_ip()


async def read_request_line(
    reader: asyncio.StreamReader,
) -> tuple[bytes, bool]:
    """Read one request line from the client.

    A line longer than the stream limit is consumed up to and including
    its newline, so none of it is mistaken for a further request.

    Args:
        reader (asyncio.StreamReader): The client stream.

    Returns:
        tuple[bytes, bool]: The line (b"" at end of stream) and whether it
        overran the stream limit and was discarded.

    """
    try:
        return await reader.readuntil(b"\n"), False
    except asyncio.IncompleteReadError as e:
        # End of stream; a final unterminated line is still a request
        return e.partial, False
    except asyncio.LimitOverrunError as e:
        consumed = e.consumed

    while True:
        # Drop everything before the newline, then the newline itself
        await reader.readexactly(consumed)
        try:
            await reader.readuntil(b"\n")
            return b"", True
        except asyncio.IncompleteReadError:
            return b"", True
        except asyncio.LimitOverrunError as e:
            consumed = e.consumed


class Server:
    """Asyncio TCP server exposing a Name Prefix Tree session."""

    def __init__(self, ip: str, config_file_path: Path):
        self.ip = ip
        self.configuration_settings = load_config_file(config_file_path)
        self.session = NameTreeSession(self.configuration_settings.names_path)
        self.is_running = True
        self.ssl_context: Union[ssl.SSLContext, None] = None
        self.server_instance: Union[asyncio.Server, None] = None
        self.log_details: bool = False
        self._active_connections: weakref.WeakSet[asyncio.StreamWriter] = (
            weakref.WeakSet()
        )
        # One lock guards both the tree and the statistics table
        self._session_lock = asyncio.Lock()

    async def _setup_ssl_context(
        self,
        cert_path: Path,
        key_path: Path,
        gen_path: Path,
    ) -> None:
        """Setup the SSL context for the server.

        Args:
            cert_path (Path): The path to the certificate file.
            key_path (Path): The path to the key file.
            gen_path (Path): The path to the generation directory.

        """
        if self.configuration_settings.use_ssl:
            try:
                generate_certificate_and_key(
                    gen_path,
                    str(cert_path.name),
                    str(key_path.name),
                )
                self.ssl_context = create_server_ssl_context(
                    gen_path / cert_path,
                    gen_path / key_path,
                )
                print(
                    f"[SERVER] SSL context loaded from {cert_path} and "
                    f"{key_path}",
                )
            except Exception as e:
                print(
                    "[SERVER ERROR] Failed to load SSL cert/key: "
                    f"{e}. Running without SSL.",
                    file=sys.stderr,
                )
                self.ssl_context = None
        else:
            self.ssl_context = None
            print("[SERVER] SSL is disabled by configuration.")

    async def process_request(self, request: str) -> tuple[str, bool]:
        """Parse and execute one request line.

        Args:
            request (str): The decoded request line.

        Returns:
            tuple[str, bool]: The response text and whether the client
            asked to end the connection.

        """
        try:
            command, name = parse_request(request)
        except RequestParsingError as e:
            return f"ERROR: {e}", False

        if command == Command.EXIT:
            return self.session.execute(command), True

        loop = asyncio.get_running_loop()
        async with self._session_lock:
            response = await loop.run_in_executor(
                None,
                self.session.execute,
                command,
                name,
            )
        return response, False

    async def _handle_client(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Handle individual client connections using asyncio.

        Every request line gets one response, terminated by a line
        holding a single dot.

        Args:
            reader (asyncio.StreamReader): The reader for the client
            connection.
            writer (asyncio.StreamWriter): The writer for the client
            connection.

        """
        peername = writer.get_extra_info("peername")
        client_address_str = (
            f"{peername[0]}:{peername[1]}" if peername else "UNKNOWN"
        )
        client_ip = peername[0] if peername else "N/A"
        print(f"[SERVER] Accepted connection from {client_address_str}")

        self._active_connections.add(writer)

        try:
            while self.is_running:
                start_time_total = time.perf_counter()

                data, oversized = await read_request_line(reader)

                if not data and not oversized:
                    print(
                        f"[SERVER] Client {client_address_str} disconnected.",
                    )
                    break

                request = (
                    data.decode("utf-8", errors="replace")
                    .strip()
                    .replace("\x00", "")
                )
                close_connection = False

                # Enforce a strict maximum message size
                if oversized or len(data) > MAX_CHUNK_SIZE:
                    response_message_str = (
                        "ERROR: Message exceeds maximum allowed size."
                    )
                elif not request:
                    continue
                else:
                    try:
                        (
                            response_message_str,
                            close_connection,
                        ) = await self.process_request(request)
                    except Exception as e:
                        response_message_str = f"ERROR: Command failed: {e}"
                        log(
                            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
                            client_ip,
                            request,
                            -1.0,
                        )

                writer.write(
                    (response_message_str + RESPONSE_TERMINATOR).encode(
                        "utf-8",
                    ),
                )
                await writer.drain()

                end_time_total = time.perf_counter()
                elapsed_ms = (end_time_total - start_time_total) * 1000
                time_stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

                if self.log_details:
                    log(time_stamp, client_ip, request, elapsed_ms)

                print(
                    "[SERVER] Handled "
                    f"{client_address_str}: '{request[:50]}' -> "
                    f"'{response_message_str[:50]}...' in "
                    f"{elapsed_ms:.2f} ms",
                )

                if close_connection:
                    break

        except ConnectionResetError:
            print(
                f"[SERVER] Client {client_address_str} forcefully "
                "disconnected.",
            )
        except asyncio.IncompleteReadError:
            print(
                f"[SERVER] Client {client_address_str} connection closed "
                "unexpectedly.",
            )
        except Exception as e:
            print(
                f"[SERVER ERROR] Error handling client "
                f"{client_address_str}: {e}",
                file=sys.stderr,
            )
        finally:
            self._active_connections.discard(writer)

            try:
                writer.close()
                await writer.wait_closed()
            except Exception as e:
                print(
                    f"[SERVER] Error closing connection to "
                    f"{client_address_str}: {e}",
                )

            print(f"[SERVER] Connection with {client_address_str} closed.")

    async def start(
        self,
        generation_path: Path,
        certfile_path: Path,
        key_file_path: Path,
        log_details: bool,
    ) -> None:
        """Load the names file and start the TCP server.

        Args:
            generation_path (Path): The path to the generation directory.
            certfile_path (Path): The path to the certificate file.
            key_file_path (Path): The path to the key file.
            log_details (bool): Whether to log details.

        """
        self.log_details = log_details

        try:
            setup_logging_queue()
            start_logging_listener()
            setup_process_logging()

            loaded = self.session.load()
            print(
                f"[SERVER] Loaded {loaded} names from "
                f"{self.configuration_settings.names_path}.",
            )

            if self.configuration_settings.use_ssl:
                await self._setup_ssl_context(
                    certfile_path,
                    key_file_path,
                    generation_path,
                )

            raw_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            raw_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

            server_address = (self.ip, self.configuration_settings.port)
            raw_socket.bind(server_address)
            print(f"[SERVER] Bound raw socket to {server_address}")

            self.server_instance = await asyncio.start_server(
                self._handle_client,
                ssl=self.ssl_context,
                sock=raw_socket,
                limit=MAX_CHUNK_SIZE * 2,
            )

            addrs = ", ".join(
                str(sock.getsockname())
                for sock in self.server_instance.sockets
            )
            print(
                "[SERVER] Server is serving on "
                f"{addrs} with "
                f"{'SSL' if self.ssl_context else 'no SSL'}.",
            )
            print("[SERVER] Press Ctrl+C to shut down.")

            await self.server_instance.serve_forever()

        except asyncio.CancelledError:
            print("[SERVER] Asyncio server task cancelled.")
        except KeyboardInterrupt:
            print("\n[SERVER] Shutting down due to KeyboardInterrupt...")
        except Exception as e:
            print(
                "[SERVER ERROR] An unhandled error occurred in main server "
                f"loop: {e}",
                file=sys.stderr,
            )
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Gracefully stop the server and clean up resources.

        Stops accepting new connections, closes all active connections,
        saves the names if configured to, releases the session, stops the
        logging listener and closes the asyncio server.
        """
        print("[SERVER] Initiating graceful shutdown...")

        self.is_running = False

        for writer in list(self._active_connections):
            try:
                writer.close()
                await writer.wait_closed()
            except Exception as e:
                print(
                    f"[SERVER] Error closing connection during shutdown: {e}",
                )
        self._active_connections.clear()

        if not self.session.closed:
            if self.configuration_settings.save_on_exit:
                try:
                    count = self.session.save()
                    print(
                        f"[SERVER] Saved {count} names to "
                        f"{self.configuration_settings.names_path}.",
                    )
                except OSError as e:
                    print(
                        f"[SERVER ERROR] Error saving names: {e}",
                        file=sys.stderr,
                    )
            self.session.close()

        try:
            stop_logging_listener()
        except Exception as e:
            print(f"[SERVER] Error stopping logging listener: {e}")

        if self.server_instance:
            try:
                self.server_instance.close()
                await self.server_instance.wait_closed()
                print("[SERVER] Asyncio server socket closed.")

            except Exception as e:
                print(f"[SERVER] Error closing asyncio server: {e}")

            finally:
                self.server_instance = None

        if self.ssl_context:
            self.ssl_context = None

        gc.collect()

        print("[SERVER] Server shutdown complete.")
