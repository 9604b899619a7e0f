"""This module provides the entry point for running the server."""

import argparse
import asyncio
import os
import subprocess
import sys
from pathlib import Path
from typing import Any

from src.server.server import Server, resolve_ip

WORKDIR = Path("/tmp/")


def parse_arguments(argv: Any = None) -> argparse.Namespace:
    """Parse the command line of the server.

    Args:
        argv (Any): The arguments to parse; defaults to sys.argv.

    Returns:
        argparse.Namespace: The parsed arguments.

    """
    parser = argparse.ArgumentParser(description="Run the server.")
    parser.add_argument(
        "--ip",
        choices=["local", "public", "loopback"],
        default="public",
        help="Serve on the local network address, on all interfaces "
        "(public) or on 127.0.0.1 (loopback).",
    )
    parser.add_argument(
        "--mode",
        default="normal",
        choices=["normal", "daemon"],
        help="Run mode: 'normal' or 'daemon' (default: normal)",
    )
    parser.add_argument(
        "--config_path",
        type=str,
        default=str(Path(__file__).parent / "config.txt"),
        help="Optional path to the config file.",
        required=False,
    )
    return parser.parse_args(argv)


async def main() -> None:
    """Run the server."""
    args = parse_arguments()

    if args.mode == "daemon":
        # Run the server as a daemon using the current Python executable
        # and environment
        env = os.environ.copy()
        env["PYTHONPATH"] = str(Path(__file__).parent)
        subprocess.run(
            [
                sys.executable,
                "-m",
                "src.server.daemon",
                "--ip",
                str(args.ip),
                "--config_path",
                str(args.config_path),
            ],
            check=False,
            env=env,
            cwd=str(Path(__file__).parent),
        )

        return

    server_instance = Server(resolve_ip(args.ip), Path(args.config_path))

    await server_instance.start(
        generation_path=WORKDIR,
        certfile_path=Path("cert.pem"),
        key_file_path=Path("key.pem"),
        log_details=True,
    )


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("[SERVER] Shutdown signal received.")
