"""Process records and the psutil-backed process table source."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import psutil

from procfilter.exceptions import ProcessSourceError

logger = logging.getLogger(__name__)

_BINARY_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")


@dataclass(frozen=True)
class ProcessRecord:
    """One row of the process table.

    Attributes:
        pid: Process ID.
        name: Process name as reported by the OS.
        cpu_usage: CPU usage in percent (may exceed 100 on multi-core hosts).
        mem_usage: Resident memory as a percentage of total memory.
        rps: Bytes read per second over the sampling interval.
        wps: Bytes written per second over the sampling interval.
        total_read: Bytes read since process start.
        total_write: Bytes written since process start.
    """

    pid: int
    name: str
    cpu_usage: float = 0.0
    mem_usage: float = 0.0
    rps: float = 0.0
    wps: float = 0.0
    total_read: float = 0.0
    total_write: float = 0.0


def format_bytes(value: float, *, per_second: bool = False) -> str:
    """Render a byte quantity with binary units, e.g. ``1.5MiB``."""
    amount = float(value)
    unit = _BINARY_UNITS[0]
    for unit in _BINARY_UNITS:
        if abs(amount) < 1024 or unit == _BINARY_UNITS[-1]:
            break
        amount /= 1024
    text = f"{amount:.0f}{unit}" if unit == "B" else f"{amount:.1f}{unit}"
    return f"{text}/s" if per_second else text


def _io_totals(proc: psutil.Process) -> tuple[float, float]:
    """Return cumulative (read, write) bytes, or zeros where unsupported."""
    try:
        counters = proc.io_counters()
    except (psutil.AccessDenied, AttributeError, NotImplementedError):
        return 0.0, 0.0
    return float(counters.read_bytes), float(counters.write_bytes)


def collect_processes(interval: float = 0.5) -> list[ProcessRecord]:
    """Take a snapshot of the process table.

    CPU usage and I/O rates are measured between two samples taken
    *interval* seconds apart. Processes that exit or deny access while
    sampling are skipped.

    Args:
        interval: Seconds between the two samples. With ``0`` rates are
            reported as zero and CPU usage as psutil's first reading.

    Returns:
        Records ordered by PID.

    Raises:
        ProcessSourceError: If the process table cannot be listed.
    """
    try:
        procs = list(psutil.process_iter(["pid", "name"]))
    except (psutil.Error, OSError) as e:
        raise ProcessSourceError(f"Cannot list processes: {e}") from e

    baseline: dict[int, tuple[float, float]] = {}
    for proc in procs:
        try:
            proc.cpu_percent(None)
            baseline[proc.pid] = _io_totals(proc)
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            logger.debug("Skipping pid %d: %s", proc.pid, e)

    if interval > 0:
        time.sleep(interval)

    records: list[ProcessRecord] = []
    for proc in procs:
        if proc.pid not in baseline:
            continue
        try:
            with proc.oneshot():
                name = proc.info.get("name") or proc.name()
                cpu_usage = proc.cpu_percent(None)
                mem_usage = proc.memory_percent()
                total_read, total_write = _io_totals(proc)
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            logger.debug("Skipping pid %d: %s", proc.pid, e)
            continue

        prev_read, prev_write = baseline[proc.pid]
        rps = wps = 0.0
        if interval > 0:
            rps = max(total_read - prev_read, 0.0) / interval
            wps = max(total_write - prev_write, 0.0) / interval

        records.append(
            ProcessRecord(
                pid=proc.pid,
                name=name or "",
                cpu_usage=float(cpu_usage),
                mem_usage=float(mem_usage),
                rps=rps,
                wps=wps,
                total_read=total_read,
                total_write=total_write,
            )
        )

    logger.debug("Collected %d of %d processes", len(records), len(procs))
    return sorted(records, key=lambda r: r.pid)
