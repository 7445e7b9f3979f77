"""
Probe plumbing for hostcheck

Two layers:
- CommandRunner: the only place that touches the host. Runs tools under a
  timeout and reads files, reporting unavailability and timeouts as
  values instead of exceptions.
- ProbeCollector: hardware listings keyed by ProbeKind, fetched at most
  once per run and cached for the classification and remediation steps.

Usage:
    runner = CommandRunner()
    probes = ProbeCollector(runner)
    wifi = probes.fetch('wifi')      # runs lspci
    wifi = probes.fetch('wifi')      # cache hit
"""

import os
import re
import shutil
import socket
import subprocess
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class ProbeStatus(Enum):
    """Outcome of a single command invocation."""
    OK = "ok"                       # Tool ran (any return code)
    UNAVAILABLE = "unavailable"     # Tool missing or not executable
    TIMEOUT = "timeout"             # Tool exceeded its time budget
    ERROR = "error"                 # OS-level failure starting the tool


@dataclass
class CommandOutput:
    """Captured result of running an external tool."""
    args: Sequence[str]
    status: ProbeStatus
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """True if the tool ran and exited with status 0."""
        return self.status == ProbeStatus.OK and self.returncode == 0

    @property
    def ran(self) -> bool:
        return self.status == ProbeStatus.OK

    @property
    def lines(self) -> List[str]:
        """Non-empty stdout lines."""
        return [line for line in self.stdout.splitlines() if line.strip()]

    def __bool__(self) -> bool:
        return self.ok


class CommandRunner:
    """
    Read-only access to the host.

    Every method degrades to an empty/False result when the underlying tool
    or file is missing, so callers can record a Skip instead of crashing.
    """

    def __init__(self, default_timeout: float = DEFAULT_TIMEOUT):
        self.default_timeout = default_timeout

    def exists(self, tool: str) -> bool:
        """Check whether a tool is on PATH."""
        return shutil.which(tool) is not None

    def run(self, args: Sequence[str], timeout: Optional[float] = None) -> CommandOutput:
        """Run a command, capturing text output under a timeout."""
        timeout = timeout or self.default_timeout
        try:
            result = subprocess.run(
                list(args),
                capture_output=True, text=True, timeout=timeout,
                errors='replace'
            )
            logger.debug(f"{' '.join(args)} -> rc={result.returncode}")
            return CommandOutput(
                args=args,
                status=ProbeStatus.OK,
                returncode=result.returncode,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
            )
        except FileNotFoundError:
            logger.debug(f"{args[0]} not found")
            return CommandOutput(args=args, status=ProbeStatus.UNAVAILABLE)
        except PermissionError as e:
            logger.debug(f"{args[0]} not executable: {e}")
            return CommandOutput(args=args, status=ProbeStatus.UNAVAILABLE)
        except subprocess.TimeoutExpired:
            logger.warning(f"{' '.join(args)} timed out after {timeout}s")
            return CommandOutput(args=args, status=ProbeStatus.TIMEOUT)
        except OSError as e:
            logger.warning(f"Failed to run {' '.join(args)}: {e}")
            return CommandOutput(args=args, status=ProbeStatus.ERROR)

    def read_file(self, path: Union[str, Path]) -> Optional[str]:
        """Read a text file, returning None if it is missing or unreadable."""
        try:
            return Path(path).read_text(errors='replace')
        except (FileNotFoundError, PermissionError, IsADirectoryError):
            return None
        except OSError as e:
            logger.debug(f"Cannot read {path}: {e}")
            return None

    def path_exists(self, path: Union[str, Path]) -> bool:
        return Path(path).exists()

    def list_dir(self, path: Union[str, Path]) -> List[str]:
        """Directory entries, or an empty list if unreadable."""
        try:
            return sorted(os.listdir(path))
        except OSError:
            return []

    def resolve(self, hostname: str, timeout: Optional[float] = None) -> bool:
        """Resolve a hostname within timeout, through getent when available."""
        if self.exists('getent'):
            return self.run(['getent', 'ahosts', hostname], timeout=timeout).ok
        timeout = timeout or self.default_timeout
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            executor.submit(socket.gethostbyname, hostname).result(timeout=timeout)
            return True
        except FutureTimeout:
            logger.warning(f"Lookup of {hostname} timed out after {timeout}s")
            return False
        except (socket.gaierror, UnicodeError):
            return False
        finally:
            executor.shutdown(wait=False)

    def cpu_count(self) -> int:
        return os.cpu_count() or 1


# =============================================================================
# Hardware probes
# =============================================================================

class ProbeKind(Enum):
    """Hardware listings the collector knows how to fetch."""
    BLUETOOTH = "bluetooth"
    WIFI = "wifi"
    AUDIO = "audio"
    TOUCHPAD = "touchpad"
    GPU = "gpu"
    STORAGE = "storage"


# (tool, args, line filter) tried in order until one produces output
_LISTING_SOURCES = {
    ProbeKind.BLUETOOTH: [
        (['lsusb'], r'bluetooth|\bbt\b'),
        (['lspci'], r'bluetooth|\bbt\b'),
    ],
    ProbeKind.WIFI: [(['lspci'], r'wireless|wifi|802\.11|network')],
    ProbeKind.AUDIO: [(['lspci'], r'audio|sound')],
    ProbeKind.TOUCHPAD: [(['xinput', 'list'], r'touchpad|synaptics|elan')],
    ProbeKind.GPU: [(['lspci'], r'vga|3d|display')],
    ProbeKind.STORAGE: [(['lsblk', '-d', '-o', 'NAME,MODEL,SIZE,ROTA'], r'^(?!\s*NAME\b)\S')],
}

# lspci -nn filters for vendor:device extraction
_ID_FILTERS = {
    ProbeKind.BLUETOOTH: r'bluetooth|wireless.*\bbt\b',
    ProbeKind.WIFI: r'wireless|802\.11|wifi',
    ProbeKind.AUDIO: r'audio',
    ProbeKind.GPU: r'gpu|vga|3d|display',
}

# lspci -v excerpts: (filter, lines after match)
_CONTEXT_SOURCES = {
    ProbeKind.BLUETOOTH: (r'bluetooth', 5),
    ProbeKind.GPU: (r'vga|nvidia', 10),
}

_BRACKETED_ID = re.compile(r'\[([0-9a-f]{4}:[0-9a-f]{4})\]', re.IGNORECASE)
_BARE_ID = re.compile(r'\b([0-9a-f]{4}:[0-9a-f]{4})\b', re.IGNORECASE)

STORAGE_MAX_LINES = 5


def extract_hardware_ids(text: Optional[str], limit: int = 3, bracketed: bool = False) -> List[str]:
    """
    Unique vendor:device identifiers in text, lower-cased, in order.

    Args:
        text: Tool output
        limit: Maximum number of IDs returned
        bracketed: Only accept "[xxxx:xxxx]" (lspci -nn style)
    """
    if not text:
        return []
    regex = _BRACKETED_ID if bracketed else _BARE_ID
    ids: List[str] = []
    for match in regex.findall(text):
        hw_id = match.lower()
        if hw_id not in ids:
            ids.append(hw_id)
        if len(ids) >= limit:
            break
    return ids


def _grep(lines: List[str], pattern: str) -> List[str]:
    regex = re.compile(pattern, re.IGNORECASE)
    return [line.rstrip() for line in lines if regex.search(line)]


def _grep_after(lines: List[str], pattern: str, after: int) -> List[str]:
    """grep -A: matching lines plus the next `after` lines."""
    regex = re.compile(pattern, re.IGNORECASE)
    keep: List[str] = []
    remaining = 0
    for line in lines:
        if regex.search(line):
            keep.append(line.rstrip())
            remaining = after
        elif remaining > 0:
            keep.append(line.rstrip())
            remaining -= 1
    return keep


class ProbeCollector:
    """
    Per-run cache of hardware observations.

    Each probe key is fetched from the host at most once; the cache lives as
    long as the collector (one diagnostic run). Empty string means "no
    information" and is a valid, cached answer.
    """

    def __init__(self, runner: CommandRunner, max_lines: int = 3,
                 timeout: float = DEFAULT_TIMEOUT):
        self.runner = runner
        self.max_lines = max_lines
        self.timeout = timeout
        self._cache: Dict[ProbeKind, str] = {}
        self._id_cache: Dict[ProbeKind, List[str]] = {}
        self._context_cache: Dict[ProbeKind, str] = {}
        self._listing_cache: Dict[tuple, List[str]] = {}

    @staticmethod
    def _kind(key: Union[ProbeKind, str]) -> ProbeKind:
        if isinstance(key, ProbeKind):
            return key
        try:
            return ProbeKind(str(key).lower())
        except ValueError:
            raise ValueError(f"Unknown probe key: {key!r}") from None

    def _listing(self, args: Sequence[str]) -> List[str]:
        """Output lines of a listing tool, shared between probe kinds."""
        key = tuple(args)
        if key not in self._listing_cache:
            output = self.runner.run(args, timeout=self.timeout)
            self._listing_cache[key] = output.lines if output.ok else []
        return self._listing_cache[key]

    def fetch(self, key: Union[ProbeKind, str]) -> str:
        """Return the (cached) hardware listing for a probe kind."""
        kind = self._kind(key)
        if kind in self._cache:
            return self._cache[kind]

        limit = STORAGE_MAX_LINES if kind == ProbeKind.STORAGE else self.max_lines
        found: List[str] = []
        for args, pattern in _LISTING_SOURCES[kind]:
            found = _grep(self._listing(args), pattern)[:limit]
            if found:
                break

        value = "\n".join(found)
        self._cache[kind] = value
        logger.debug(f"Probe {kind.value}: {len(found)} line(s)")
        return value

    def hardware_ids(self, key: Union[ProbeKind, str], limit: int = 3) -> List[str]:
        """vendor:device identifiers for a probe kind (cached)."""
        kind = self._kind(key)
        if kind in self._id_cache:
            return list(self._id_cache[kind])

        ids: List[str] = []
        id_filter = _ID_FILTERS.get(kind)
        if id_filter:
            pci_lines = _grep(self._listing(['lspci', '-nn']), id_filter)
            ids = extract_hardware_ids("\n".join(pci_lines), limit, bracketed=True)
            if not ids:
                usb_lines = _grep(self._listing(['lsusb']), kind.value)
                ids = extract_hardware_ids("\n".join(usb_lines), limit)

        self._id_cache[kind] = ids
        return list(self._id_cache[kind])

    def context(self, key: Union[ProbeKind, str]) -> str:
        """Verbose device excerpt used as remediation context (cached)."""
        kind = self._kind(key)
        if kind in self._context_cache:
            return self._context_cache[kind]

        text = ""
        source = _CONTEXT_SOURCES.get(kind)
        if source:
            pattern, after = source
            found = _grep_after(self._listing(['lspci', '-v']), pattern, after)
            if not found and kind == ProbeKind.BLUETOOTH:
                found = _grep_after(self._listing(['lsusb', '-v']), pattern, after)
            text = "\n".join(found)

        self._context_cache[kind] = text
        return text

    def inventory(self) -> Dict[str, str]:
        """Fetched, non-empty probes in fetch order."""
        return {kind.value: value for kind, value in self._cache.items() if value}
