"""Unit tests for the psutil-backed process source."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import psutil
import pytest

from procfilter.exceptions import ProcessSourceError
from procfilter.process import ProcessRecord, collect_processes, format_bytes


def _fake_proc(
    pid: int,
    name: str,
    *,
    cpu: tuple[float, float] = (0.0, 0.0),
    mem: float = 0.0,
    io: tuple[tuple[int, int], tuple[int, int]] | None = ((0, 0), (0, 0)),
) -> MagicMock:
    proc = MagicMock()
    proc.pid = pid
    proc.info = {"pid": pid, "name": name}
    proc.cpu_percent.side_effect = list(cpu)
    proc.memory_percent.return_value = mem
    if io is None:
        proc.io_counters.side_effect = psutil.AccessDenied(pid)
    else:
        proc.io_counters.side_effect = [
            SimpleNamespace(read_bytes=r, write_bytes=w) for r, w in io
        ]
    return proc


class TestFormatBytes:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, "0B"),
            (512, "512B"),
            (1024, "1.0KiB"),
            (1536, "1.5KiB"),
            (3 * 1_073_741_824, "3.0GiB"),
            (2**50, "1024.0TiB"),
        ],
    )
    def test_format(self, value: float, expected: str) -> None:
        assert format_bytes(value) == expected

    def test_per_second(self) -> None:
        assert format_bytes(1_048_576, per_second=True) == "1.0MiB/s"


class TestCollectProcesses:
    def test_builds_records(self) -> None:
        procs = [
            _fake_proc(
                20,
                "python3",
                cpu=(0.0, 12.5),
                mem=3.0,
                io=((1_000, 0), (1_500, 100)),
            ),
            _fake_proc(1, "init", cpu=(0.0, 0.5), mem=0.1),
        ]
        with (
            patch("procfilter.process.psutil.process_iter", return_value=procs),
            patch("procfilter.process.time.sleep") as sleep,
        ):
            records = collect_processes(0.5)

        sleep.assert_called_once_with(0.5)
        assert [r.pid for r in records] == [1, 20]
        assert records[1] == ProcessRecord(
            pid=20,
            name="python3",
            cpu_usage=12.5,
            mem_usage=3.0,
            rps=1_000.0,
            wps=200.0,
            total_read=1_500.0,
            total_write=100.0,
        )

    def test_zero_interval_skips_rates(self) -> None:
        procs = [_fake_proc(5, "worker", io=((100, 100), (900, 900)))]
        with (
            patch("procfilter.process.psutil.process_iter", return_value=procs),
            patch("procfilter.process.time.sleep") as sleep,
        ):
            (record,) = collect_processes(0)

        sleep.assert_not_called()
        assert record.rps == 0.0
        assert record.wps == 0.0
        assert record.total_read == 900.0

    def test_vanished_process_is_skipped(self) -> None:
        gone = _fake_proc(2, "gone")
        gone.cpu_percent.side_effect = psutil.NoSuchProcess(2)
        procs = [gone, _fake_proc(3, "alive")]
        with (
            patch("procfilter.process.psutil.process_iter", return_value=procs),
            patch("procfilter.process.time.sleep"),
        ):
            records = collect_processes(0.1)

        assert [r.name for r in records] == ["alive"]

    def test_process_exiting_between_samples_is_skipped(self) -> None:
        flaky = _fake_proc(2, "flaky")
        flaky.memory_percent.side_effect = psutil.NoSuchProcess(2)
        with (
            patch("procfilter.process.psutil.process_iter", return_value=[flaky]),
            patch("procfilter.process.time.sleep"),
        ):
            assert collect_processes(0.1) == []

    def test_io_access_denied_reports_zero(self) -> None:
        procs = [_fake_proc(9, "secret", cpu=(0.0, 4.0), io=None)]
        with (
            patch("procfilter.process.psutil.process_iter", return_value=procs),
            patch("procfilter.process.time.sleep"),
        ):
            (record,) = collect_processes(0.1)

        assert record.cpu_usage == 4.0
        assert record.total_read == 0.0
        assert record.rps == 0.0

    def test_listing_failure(self) -> None:
        with patch("procfilter.process.psutil.process_iter", side_effect=OSError("denied")):
            with pytest.raises(ProcessSourceError, match="Cannot list processes"):
                collect_processes(0)
