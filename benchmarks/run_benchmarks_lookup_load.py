"""Benchmark LOOKUP round trips against the Name Prefix Tree server."""

import asyncio
import gc
import json
import multiprocessing
import random
import string
import sys
import tempfile
import time
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import psutil

from src.client.client import Client

HOST = "127.0.0.1"
PORT = 5051
NUMBER_OF_CLIENTS_IN_EACH_BENCHMARK = [1, 10, 100]
DATA_SIZES = [1, 10, 100]  # Thousands of names
RESULTS_DIR = (
    Path(__file__).parent.parent
    / "static"
    / "benchmarks"
    / "lookup_load_benchmark_results"
)


def generate_names(count: int, seed: int = 7) -> list[str]:
    """Generate `count` random alphabetic names.

    Args:
        count (int): How many names to generate.
        seed (int): Seed of the random generator.

    Returns:
        list[str]: Names of 3 to 12 letters with a capitalized first letter.

    """
    rng = random.Random(seed)
    return [
        "".join(
            rng.choice(string.ascii_lowercase)
            for _ in range(rng.randint(3, 12))
        ).capitalize()
        for _ in range(count)
    ]


def write_benchmark_files(workdir: Path, names: list[str]) -> Path:
    """Write the names file and a config pointing at it.

    Args:
        workdir (Path): Directory for both files.
        names (list[str]): The names to serve.

    Returns:
        Path: The configuration file.

    """
    names_path = workdir / "names.txt"
    names_path.write_text("\n".join(names) + "\n", encoding="utf-8")

    config_path = workdir / "config.txt"
    config_path.write_text(
        f"namespath={names_path}\n"
        f"port={PORT}\n"
        "use_ssl=false\n"
        "save_on_exit=false\n",
        encoding="utf-8",
    )
    return config_path


async def initialize_server(
    config_path: Path,
) -> Optional[asyncio.subprocess.Process]:
    """Initialize the server process.

    Args:
        config_path (Path): The path to the configuration file.

    Returns:
        Optional[asyncio.subprocess.Process]: The server process.

    """
    try:
        server_process = await asyncio.create_subprocess_exec(
            sys.executable,
            "run_server.py",
            "--ip",
            "loopback",
            "--config_path",
            str(config_path),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=sys.stderr,
            cwd=str(Path(__file__).parent.parent),
        )
        return server_process
    except Exception as e:
        print(f"[Server Error] {e}")
        return None


async def cleanup_server(server_process: asyncio.subprocess.Process) -> None:
    """Terminate the server process and all of its children.

    Args:
        server_process (asyncio.subprocess.Process): The server process.

    """
    try:
        parent = psutil.Process(server_process.pid)
        children = parent.children(recursive=True)

        for child in children:
            try:
                child.terminate()
            except psutil.NoSuchProcess:
                pass

        server_process.terminate()

        gone, alive = psutil.wait_procs([parent] + children, timeout=3)

        for p in alive:
            try:
                p.kill()
            except psutil.NoSuchProcess:
                pass

    except psutil.NoSuchProcess:
        pass
    except Exception as e:
        print(f"Error during cleanup: {e}")


async def single_client(name: str) -> Optional[float]:
    """Look up one name over a fresh connection.

    Args:
        name (str): The name to look up.

    Returns:
        Optional[float]: The round-trip time in milliseconds, or None if
        the name was not found.

    """
    client = Client(HOST, PORT)
    try:
        await client.connect()
        start = time.perf_counter()
        response = await client.request(f"LOOKUP {name}")
        if response is None or not response.endswith(": Found"):
            print(f"Unexpected lookup response: {response!r}")
            return None
        return (time.perf_counter() - start) * 1000
    except Exception as e:
        print(f"Error in simulating the client: {e}")
        return None
    finally:
        try:
            await client.close()
        except Exception as e:
            print(f"Error closing client: {e}")


def run_client_process(
    name: str,
    result_queue: "multiprocessing.Queue[Optional[float]]",
) -> None:
    """Run one client in its own process.

    Args:
        name (str): The name to look up.
        result_queue (multiprocessing.Queue): The result queue.

    """
    result_queue.put(asyncio.run(single_client(name)))


def simulate_parallel_clients(
    names: list[str],
) -> dict[int, dict[str, float | int]]:
    """Run batches of parallel clients and collect their timings.

    Args:
        names (list[str]): The stored names; clients look up random ones.

    Returns:
        dict[int, dict[str, float | int]]: Metrics per batch size.

    """
    return_dict: dict[int, dict[str, float | int]] = {}

    for number_of_clients in NUMBER_OF_CLIENTS_IN_EACH_BENCHMARK:
        print(f"\nTesting with {number_of_clients} parallel clients...")

        result_queue: multiprocessing.Queue[Optional[float]] = (
            multiprocessing.Queue()
        )
        processes: list[multiprocessing.Process] = []
        for _ in range(number_of_clients):
            p = multiprocessing.Process(
                target=run_client_process,
                args=(random.choice(names), result_queue),
            )
            p.start()
            processes.append(p)

        results: list[Optional[float]] = [
            result_queue.get() for _ in processes
        ]
        for p in processes:
            p.join()

        valid_results = [r for r in results if r is not None]
        average = (
            sum(valid_results) / len(valid_results) if valid_results else 0.0
        )
        return_dict[number_of_clients] = {
            "average_execution_time": average,
            "success_count": len(valid_results),
        }
        print(
            f"Success rate: "
            f"{len(valid_results) / number_of_clients * 100:.1f}%",
        )
        print(f"Average response time: {average:.2f} ms")

    return return_dict


def plot_results(
    data_size: int,
    results: dict[int, dict[str, float | int]],
) -> Path:
    """Save a bar chart of the average round trip per batch size.

    Args:
        data_size (int): Thousands of names served.
        results (dict): Output of simulate_parallel_clients.

    Returns:
        Path: The written image.

    """
    y_values = [
        float(results[n]["average_execution_time"])
        for n in NUMBER_OF_CLIENTS_IN_EACH_BENCHMARK
    ]
    try:
        plt.figure(figsize=(8, 5))
        x = range(len(NUMBER_OF_CLIENTS_IN_EACH_BENCHMARK))
        plt.bar(x, y_values, color="steelblue")
        plt.xticks(
            x,
            [str(item) for item in NUMBER_OF_CLIENTS_IN_EACH_BENCHMARK],
        )
        plt.xlabel("Clients")
        plt.ylabel("Round Trip Time (ms)")
        plt.title(f"LOOKUP Round Trip per Client ({data_size}K names)")

        for i, v in enumerate(y_values):
            plt.text(i, v + 0.01, f"{v:.2f}", ha="center", va="bottom")

        plt.tight_layout()
        RESULTS_DIR.mkdir(parents=True, exist_ok=True)
        graph_path = RESULTS_DIR / f"benchmark_lookup_{data_size}K.png"
        plt.savefig(graph_path)
        return graph_path
    finally:
        plt.close("all")


async def main() -> None:
    """Benchmark every data size and write the JSON summary."""
    results_json: dict[str, dict[int, dict[str, float | int]]] = {}

    for data_size in DATA_SIZES:
        names = generate_names(data_size * 1000)
        server_process: Optional[asyncio.subprocess.Process] = None

        with tempfile.TemporaryDirectory() as workdir:
            config_path = write_benchmark_files(Path(workdir), names)
            try:
                print(f"\n--- Benchmark Running ({data_size}K names) ---")
                server_process = await initialize_server(config_path)
                if server_process is None:
                    continue
                time.sleep(2)

                loop = asyncio.get_running_loop()
                results = await loop.run_in_executor(
                    None,
                    simulate_parallel_clients,
                    names,
                )
                results_json[f"{data_size}K"] = results
                print(f"Graph saved to {plot_results(data_size, results)}")

            except Exception as e:
                print(f"An error occurred during benchmarking: {e}")

            finally:
                if server_process is not None:
                    await cleanup_server(server_process)
                gc.collect()
                print(f"--- Benchmarking {data_size}K Finished ---\n")

    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    with open(RESULTS_DIR / "results.json", "w", encoding="utf-8") as f:
        json.dump(results_json, f, indent=4)


if __name__ == "__main__":
    asyncio.run(main())
