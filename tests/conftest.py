"""
Shared fixtures for hostcheck tests.

FakeRunner stands in for CommandRunner: commands, files and tools are
scripted per test and every invocation is counted, so tests can assert
that a probe ran exactly once.
"""

import os
import sys
from typing import Dict, Iterable, List, Optional, Sequence

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from hostcheck.checks.base import CheckContext  # noqa: E402
from hostcheck.core.diagnostics.ledger import RunLedger  # noqa: E402
from hostcheck.utils.catalog import load_catalog  # noqa: E402
from hostcheck.utils.env_config import HostcheckConfig  # noqa: E402
from hostcheck.utils.hardware import HardwareResolver  # noqa: E402
from hostcheck.utils.probes import CommandOutput, ProbeCollector, ProbeStatus  # noqa: E402


class FakeRunner:
    """Scripted CommandRunner replacement."""

    def __init__(self, cpus: int = 4):
        self.commands: Dict[tuple, CommandOutput] = {}
        self.files: Dict[str, str] = {}
        self.dirs: Dict[str, List[str]] = {}
        self.paths: set = set()
        self.tools: set = set()
        self.resolvable: set = set()
        self.cpus = cpus
        self.calls: List[tuple] = []

    # --- scripting ---

    def add(self, args: Sequence[str], stdout: str = "", returncode: int = 0, stderr: str = ""):
        """Script a command; its tool becomes available."""
        self.tools.add(args[0])
        self.commands[tuple(args)] = CommandOutput(
            args=list(args), status=ProbeStatus.OK,
            returncode=returncode, stdout=stdout, stderr=stderr,
        )
        return self

    def add_timeout(self, args: Sequence[str]):
        self.tools.add(args[0])
        self.commands[tuple(args)] = CommandOutput(args=list(args), status=ProbeStatus.TIMEOUT)
        return self

    def add_tools(self, tools: Iterable[str]):
        self.tools.update(tools)
        return self

    def add_file(self, path: str, content: str):
        self.files[path] = content
        return self

    def call_count(self, args: Sequence[str]) -> int:
        return self.calls.count(tuple(args))

    # --- CommandRunner interface ---

    def exists(self, tool: str) -> bool:
        return tool in self.tools

    def run(self, args: Sequence[str], timeout: Optional[float] = None) -> CommandOutput:
        key = tuple(args)
        self.calls.append(key)
        if key in self.commands:
            return self.commands[key]
        if args[0] not in self.tools:
            return CommandOutput(args=list(args), status=ProbeStatus.UNAVAILABLE)
        return CommandOutput(args=list(args), status=ProbeStatus.OK, returncode=1)

    def read_file(self, path) -> Optional[str]:
        return self.files.get(str(path))

    def path_exists(self, path) -> bool:
        return str(path) in self.paths or str(path) in self.files

    def list_dir(self, path) -> List[str]:
        return list(self.dirs.get(str(path), []))

    def resolve(self, hostname: str, timeout: Optional[float] = None) -> bool:
        self.calls.append(('resolve', hostname))
        return hostname in self.resolvable

    def cpu_count(self) -> int:
        return self.cpus


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def config():
    return HostcheckConfig()


@pytest.fixture(scope='session')
def catalog():
    return load_catalog()


@pytest.fixture
def probes(runner):
    return ProbeCollector(runner)


@pytest.fixture
def ledger():
    return RunLedger()


@pytest.fixture
def context(config, runner, catalog, ledger):
    """CheckContext over the fake runner, running as an unprivileged user."""
    probes = ProbeCollector(runner, max_lines=config.probe_max_lines, timeout=config.probe_timeout)
    return CheckContext(
        config=config,
        runner=runner,
        probes=probes,
        catalog=catalog,
        resolver=HardwareResolver(catalog, probes),
        ledger=ledger,
        is_root=False,
    )


def results_named(ledger: RunLedger, name: str):
    return [r for r in ledger.results if r.name == name]


def result_named(ledger: RunLedger, name: str):
    """The single result with this name."""
    found = results_named(ledger, name)
    assert len(found) == 1, f"expected one result named {name!r}, got {len(found)}"
    return found[0]
