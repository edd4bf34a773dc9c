"""
Pytest configuration and shared fixtures for the templimiter test suite.

This module provides common fixtures, fake /proc and sysfs trees, and
configuration helpers for all test modules.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


# ============================================================================
# Fake kernel interfaces
# ============================================================================


class FakeProc:
    """A minimal /proc tree: the aggregate stat file and per-pid stat files."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self.set_system_ticks(0)

    def set_system_ticks(self, total: int) -> None:
        # Only the first four counters of the cpu line are summed.
        (self.root / "stat").write_text(
            f"cpu  {total} 0 0 0 7 8 9 0 0 0\n"
            f"cpu0 {total} 0 0 0 7 8 9 0 0 0\n"
            "intr 12345\n"
        )

    def add_process(
        self,
        pid: int,
        comm: str = "worker",
        ticks: int = 0,
        state: str = "S",
        ppid: int = 1,
        pgrp: Optional[int] = None,
        session: Optional[int] = None,
        tty_nr: int = 0,
        tpgid: int = -1,
        flags: int = 4194560,
        nice: int = 0,
    ) -> None:
        pgrp = pid if pgrp is None else pgrp
        session = pid if session is None else session
        proc_dir = self.root / str(pid)
        proc_dir.mkdir(exist_ok=True)
        (proc_dir / "stat").write_text(
            f"{pid} ({comm}) {state} {ppid} {pgrp} {session} {tty_nr} {tpgid} {flags} "
            f"120 0 0 0 {ticks} 0 0 0 20 {nice} 1 0 5000 1000000 200 "
            "18446744073709551615 1 1 0 0 0 0 0 0 0 0 0 0 17 3 0 0 0 0 0\n"
        )

    def set_ticks(self, pid: int, ticks: int, **kwargs) -> None:
        self.add_process(pid, ticks=ticks, **kwargs)

    def remove_process(self, pid: int) -> None:
        shutil.rmtree(self.root / str(pid))


class FakeSysfs:
    """Thermal zones and cpufreq directories laid out like sysfs."""

    def __init__(self, root: Path):
        self.root = root

    def _write(self, path: Path, value: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"{value}\n")

    def set_temperature(self, zone: int, millidegrees: int) -> None:
        self._write(self.root / "thermal" / f"thermal_zone{zone}" / "temp", millidegrees)

    def add_cpu(
        self,
        cpu: int,
        min_freq: int = 800,
        max_freq: int = 2000,
        ceiling: Optional[int] = None,
        available: Optional[Iterable[int]] = None,
    ) -> None:
        cpufreq = self.root / "cpu" / f"cpu{cpu}" / "cpufreq"
        self._write(cpufreq / "cpuinfo_min_freq", min_freq)
        self._write(cpufreq / "cpuinfo_max_freq", max_freq)
        self._write(cpufreq / "scaling_max_freq", max_freq if ceiling is None else ceiling)
        if available is not None:
            # The kernel lists frequencies descending with a trailing space.
            listed = " ".join(str(freq) for freq in sorted(available, reverse=True))
            self._write(cpufreq / "scaling_available_frequencies", listed + " ")

    def set_ceiling(self, cpu: int, value: int) -> None:
        self._write(self.root / "cpu" / f"cpu{cpu}" / "cpufreq" / "scaling_max_freq", value)

    def ceiling(self, cpu: int) -> int:
        path = self.root / "cpu" / f"cpu{cpu}" / "cpufreq" / "scaling_max_freq"
        return int(path.read_text().strip())

    def matchers(self, proc_root: Path) -> Dict[str, str]:
        """A `[matchers]` table pointing into this tree."""
        cpufreq = str(self.root / "cpu" / "cpu*" / "cpufreq")
        return {
            "thermal": str(self.root / "thermal" / "thermal_zone*" / "temp"),
            "scaling_max_freq": f"{cpufreq}/scaling_max_freq",
            "cpuinfo_max_freq": f"{cpufreq}/cpuinfo_max_freq",
            "cpuinfo_min_freq": f"{cpufreq}/cpuinfo_min_freq",
            "scaling_available_frequencies": f"{cpufreq}/scaling_available_frequencies",
            "proc_root": str(proc_root),
        }


@pytest.fixture
def fake_proc(temp_dir):
    """An empty fake /proc with the aggregate cpu counters at zero."""
    return FakeProc(temp_dir / "proc")


@pytest.fixture
def fake_sysfs(temp_dir):
    """A fake sysfs with one thermal zone at 40C and two CPUs at full speed."""
    sysfs = FakeSysfs(temp_dir / "sys")
    sysfs.set_temperature(0, 40000)
    sysfs.add_cpu(0)
    sysfs.add_cpu(1)
    return sysfs


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def raw_config(temp_dir, fake_proc, fake_sysfs) -> Dict[str, Any]:
    """Raw configuration data pointing at the fake trees."""
    return {
        "general": {
            "log_file_path": str(temp_dir / "log" / "templimiter.log"),
            "min_sleep_ms": 10,
        },
        "throttle": {
            "enabled": True,
            "use_scaling_available": False,
            "temp_throttle": 66000,
            "temp_dethrottle": 60000,
        },
        "sigstop": {
            "enabled": True,
            "stepwise_stop": True,
            "stepwise_cont": True,
            "temp_stop": 70000,
            "temp_cont": 66000,
        },
        "whitelist": {
            "comm": ["systemd*", "Xorg"],
            "pid": [1],
        },
        "matchers": fake_sysfs.matchers(fake_proc.root),
    }


@pytest.fixture
def config_files(temp_dir, raw_config):
    """Write the raw configuration to a TOML file."""
    import toml

    config_file = temp_dir / "templimiter.toml"
    with open(config_file, "w") as f:
        toml.dump(raw_config, f)

    return {
        "config": config_file,
        "dir": temp_dir,
    }


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    yield

    from templimiter.config import DEFAULT_CONFIG_PATH, clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(DEFAULT_CONFIG_PATH)
