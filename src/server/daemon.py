"""Production-ready daemon for running the server as a Linux service."""

import argparse
import asyncio
import atexit
import signal
import sys
from pathlib import Path
from typing import Any

import daemon
from daemon.pidfile import PIDLockFile

from .logger import stop_logging_listener
from .server import Server, resolve_ip

# Path to the PID file for the daemon process
PID_FILE = "/tmp/npt_server_daemon.pid"
# Paths to log files for stdout and stderr
STDOUT_LOG = "/tmp/npt_server_stdout.log"
STDERR_LOG = "/tmp/npt_server_stderr.log"
# Working directory for the daemon process
WORKDIR = Path("/tmp/")
# File creation mask for the daemon process
UMASK = 0o027
# The configuration settings file of the server
CONFIG_PATH = Path(__file__).parent.parent.parent / "config.txt"


def cleanup() -> None:
    """Cleanup function to be called on exit."""
    try:
        stop_logging_listener()
    except Exception as e:
        print(f"Error during cleanup: {e}", file=sys.stderr)


def write_daemon_config(config_path: Path, workdir: Path) -> Path:
    """Copy the config file into the daemon's working directory.

    A relative `namespath` is resolved against the directory of the
    original config file, since the daemon runs from `workdir`.

    Args:
        config_path (Path): The original configuration file.
        workdir (Path): The working directory of the daemon.

    Returns:
        Path: The path of the copied configuration file.

    """
    with config_path.open("r", encoding="utf-8") as original_file:
        lines = original_file.readlines()

    updated_lines = []
    for line in lines:
        key, sep, value = line.partition("=")
        if sep and key.strip().lower() == "namespath":
            names_path = Path(value.strip())
            if not names_path.is_absolute():
                names_path = (config_path.parent / names_path).resolve()
            updated_lines.append(f"namespath={names_path}\n")
        else:
            updated_lines.append(line)

    daemon_config_path = workdir / config_path.name
    with daemon_config_path.open("w", encoding="utf-8") as file:
        file.writelines(updated_lines)
    return daemon_config_path


async def main(args: argparse.Namespace) -> None:
    """Run the server."""
    server_instance = Server(resolve_ip(args.ip), Path(args.config_path))

    await server_instance.start(
        generation_path=WORKDIR,
        certfile_path=Path("cert.pem"),
        key_file_path=Path("key.pem"),
        log_details=True,
    )


def handle_sigterm(signum: int, frame: Any) -> None:
    """Handle SIGTERM or SIGINT signals to perform a graceful shutdown of
    the application.

    Args:
        signum (int): The signal number received.
        frame (FrameType): The current stack frame (unused).

    """
    cleanup()
    sys.exit(0)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the server daemon.")
    parser.add_argument(
        "--ip",
        choices=["local", "public", "loopback"],
        default="public",
        help="Serve on the local network address, on all interfaces "
        "(public) or on 127.0.0.1 (loopback).",
    )
    parser.add_argument(
        "--config_path",
        type=str,
        default=str(CONFIG_PATH),
        help="Optional path to the config file.",
        required=False,
    )
    arguments = parser.parse_args()
    arguments.config_path = str(
        write_daemon_config(Path(arguments.config_path).resolve(), WORKDIR),
    )

    # Register cleanup function
    atexit.register(cleanup)

    # Ensure log files exist (create if not)
    open(STDOUT_LOG, "a").close()
    open(STDERR_LOG, "a").close()

    with daemon.DaemonContext(
        working_directory=str(WORKDIR),
        umask=UMASK,
        pidfile=PIDLockFile(PID_FILE),
        stdout=open(STDOUT_LOG, "a"),
        stderr=open(STDERR_LOG, "a"),
        detach_process=True,
        signal_map={signal.SIGTERM: handle_sigterm},
    ):
        asyncio.run(main(arguments))
