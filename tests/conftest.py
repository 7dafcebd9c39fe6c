"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from procfilter.process import ProcessRecord

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[search]
whole_word = true
ignore_case = false
use_regex = false

[display]
colored_output = false
sort = "pid"
columns = "pid,name,cpu"

[sampling]
interval = 0
""")
    return config_path


@pytest.fixture
def sample_records() -> list[ProcessRecord]:
    """A small process table covering names, PIDs and every metric."""
    return [
        ProcessRecord(pid=1, name="systemd", cpu_usage=0.1, mem_usage=0.3),
        ProcessRecord(
            pid=100,
            name="Chrome",
            cpu_usage=75.0,
            mem_usage=12.5,
            rps=2_000_000.0,
            wps=1_000.0,
            total_read=3 * 1_073_741_824.0,
            total_write=500_000.0,
        ),
        ProcessRecord(pid=1000, name="chromedriver", cpu_usage=50.0, mem_usage=2.5),
        ProcessRecord(pid=2048, name="python3", cpu_usage=20.0, mem_usage=8.0, wps=4_096.0),
        ProcessRecord(pid=4242, name="a.b", cpu_usage=1.0, mem_usage=0.5),
        ProcessRecord(pid=4243, name="axb", cpu_usage=1.0, mem_usage=0.5),
    ]
