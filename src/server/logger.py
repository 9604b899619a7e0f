"""Structured request logging (timestamp, IP, command, etc.)."""

import logging
import logging.handlers
import queue
import sys
import threading
import time
from pathlib import Path
from typing import Any, Union

LOG_FILE_PATH = Path(__file__).parent.parent.parent / "logs/server.log"
_LOG_LEVEL = logging.INFO

_log_queue: Union["queue.Queue[Any]", None] = None
_listener_thread: Union[threading.Thread, None] = None
_listener_stop_event: Union[threading.Event, None] = None


def setup_logging_queue() -> None:
    """Setup the global queue that log records travel through.

    This should be called ONCE before the listener is started.
    """
    global _log_queue
    if _log_queue is None:
        _log_queue = queue.Queue(-1)


def _listener_thread_target(
    log_queue: "queue.Queue[Any]",
    stop_event: threading.Event,
    log_file_path: Path,
) -> None:
    """Target function for the logging listener thread.

    This function continuously pulls log records from the queue and
    writes them to the log file.

    Args:
        log_queue (queue.Queue): The queue to pull log records from.
        stop_event (threading.Event): The event to stop the thread.
        log_file_path (Path): The rotating log file to write to.

    """
    log_file_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    formatter = logging.Formatter(
        "level=%(levelname)s | time=%(asctime)s | process=%(process)d | "
        "thread=%(thread)d | module=%(module)s | funcName=%(funcName)s | "
        "lineno=%(lineno)d | message=%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)

    print(f"[LOGGER] Listener thread started, writing to {log_file_path}")

    try:
        while not stop_event.is_set() or not log_queue.empty():
            try:
                record = log_queue.get(timeout=0.1)
                if record is None:
                    break
                file_handler.handle(record)
            except queue.Empty:
                time.sleep(0.05)
            except Exception as e:
                print(
                    f"[LOGGER ERROR] Error in logging listener: {e}",
                    file=sys.stderr,
                )
    finally:
        file_handler.close()
    print("[LOGGER] Listener thread stopped.")


def start_logging_listener(log_file_path: Path = LOG_FILE_PATH) -> None:
    """Start the dedicated listener thread for processing log messages from
    the queue.

    This should be called ONCE after setup_logging_queue().

    Args:
        log_file_path (Path): The rotating log file to write to.

    """
    global _listener_thread
    global _listener_stop_event
    if _log_queue is None:
        raise RuntimeError(
            "Log queue not initialized. Call setup_logging_queue() first.",
        )
    if _listener_thread is None:
        _listener_stop_event = threading.Event()
        _listener_thread = threading.Thread(
            target=_listener_thread_target,
            args=(_log_queue, _listener_stop_event, log_file_path),
            daemon=True,
        )
        _listener_thread.start()


def stop_logging_listener() -> None:
    """Signal the logging listener thread to stop and wait for it to finish.

    This should be called ONCE during graceful shutdown.
    """
    global _listener_thread, _listener_stop_event, _log_queue
    if _listener_stop_event:
        if _log_queue is not None:
            _log_queue.put_nowait(None)
        _listener_stop_event.set()

        if _listener_thread and _listener_thread.is_alive():
            _listener_thread.join(timeout=5)
            if _listener_thread.is_alive():
                print(
                    "[LOGGER WARNING] Logging listener thread did not stop "
                    "gracefully.",
                    file=sys.stderr,
                )
        _listener_thread = None
        _listener_stop_event = None
        _log_queue = None


def setup_process_logging() -> None:
    """Route the root logger through the queue.

    This function replaces standard handlers with a QueueHandler
    that sends messages to the listener thread.
    """
    if _log_queue is None:
        raise RuntimeError(
            "Log queue not initialized. Call setup_logging_queue() first.",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(_LOG_LEVEL)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    queue_handler = logging.handlers.QueueHandler(_log_queue)
    root_logger.addHandler(queue_handler)


def log(
    time_stamp: str,
    client_ip: str,
    request: str,
    execution_time_ms: float,
) -> None:
    """Log the details of a command execution using the configured
    logging system.

    Args:
        time_stamp (str): The timestamp of the command execution.
        client_ip (str): The IP address of the client.
        request (str): The request line.
        execution_time_ms (float): The execution time in milliseconds.

    """
    logging.info(
        "Timestamp: %s, Client IP: %s, Request: '%s', Execution Time: %.2f ms",
        time_stamp,
        client_ip,
        request,
        execution_time_ms,
    )
