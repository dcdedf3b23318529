"""Load generator for a collaborative editing WebSocket service.

Each simulated client logs in, replays two batches of scripted text
insertions and disconnects; the run reports how many clients got
through the whole script.

Command line::

    collab-bench -addr localhost:1337
    python -m collab_bench -addr localhost:1337 --clients 10 --scheme ws

Programmatic usage::

    import asyncio
    from collab_bench import BenchConfig, run_benchmark

    report = asyncio.run(run_benchmark(BenchConfig(addr="localhost:1337")))
    print(report.tally())
"""

from ._version import __version__
from .client import SimulatedClient
from .counter import SuccessCounter
from .driver import LoadDriver, run_benchmark
from .errors import (
    BenchCloseError,
    BenchConfigError,
    BenchConnectionError,
    BenchError,
    BenchProtocolError,
    BenchWriteError,
)
from .types import (
    BenchConfig,
    ChangeMsg,
    ClientResult,
    ClientStage,
    Event,
    EventKind,
    LoginMsg,
    Range,
    RunReport,
)

__all__ = [
    "__version__",
    "run_benchmark",
    "LoadDriver",
    "SimulatedClient",
    "SuccessCounter",
    "BenchConfig",
    "ClientResult",
    "ClientStage",
    "RunReport",
    "Event",
    "EventKind",
    "LoginMsg",
    "ChangeMsg",
    "Range",
    "BenchError",
    "BenchConfigError",
    "BenchConnectionError",
    "BenchWriteError",
    "BenchCloseError",
    "BenchProtocolError",
]
