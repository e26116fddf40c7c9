"""
Pytest configuration and shared fixtures for the pssmon test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the pssmon project.
"""

import sys
from pathlib import Path
from typing import List
from unittest.mock import MagicMock

import psutil
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
# smaps Fixtures
# ============================================================================

SAMPLE_SMAPS = """\
55d0c0a00000-55d0c0a2a000 r--p 00000000 fd:01 1048602                    /usr/bin/app
Size:                168 kB
Rss:                 168 kB
Pss:                  84 kB
VmFlags: rd mr mw me dw sd
55d0c0a2a000-55d0c0b00000 r-xp 0002a000 fd:01 1048602                    /usr/bin/app
Size:                856 kB
Rss:                 600 kB
Pss:                 300 kB
VmFlags: rd ex mr mw me dw sd
55d0c0c00000-55d0c0c10000 rw-p 00100000 fd:01 1048602                    /usr/bin/app
Size:                 64 kB
Rss:                  64 kB
Pss:                  64 kB
55d0c1e00000-55d0c1f00000 rw-p 00000000 00:00 0                          [heap]
Size:               1024 kB
Rss:                 512 kB
Pss:                 512 kB
7f1e2a000000-7f1e2a1c0000 r-xp 00000000 fd:01 2097300                    /usr/lib/libc.so.6
Size:               1792 kB
Rss:                1200 kB
Pss:                 120 kB
7f1e2a3c0000-7f1e2a3c4000 rw-p 001c0000 fd:01 2097300                    /usr/lib/libc.so.6
Size:                 16 kB
Rss:                  16 kB
Pss:                  16 kB
7f1e2a400000-7f1e2a500000 rw-p 00000000 00:00 0
Size:               1024 kB
Rss:                 256 kB
Pss:                 256 kB
7ffd4b000000-7ffd4b021000 rw-p 00000000 00:00 0                          [stack]
Size:                132 kB
Rss:                  32 kB
Pss:                  32 kB
7ffd4b1f0000-7ffd4b1f2000 r-xp 00000000 00:00 0                          [vdso]
Size:                  8 kB
Rss:                   4 kB
Pss:                   1 kB
"""


@pytest.fixture
def sample_smaps() -> str:
    """smaps text of a small process whose executable is /usr/bin/app."""
    return SAMPLE_SMAPS


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "selection": {
            "pattern": "python",
            "match_children": True,
            "match_self": False,
            "fail_on_permission_error": False,
        },
        "profiler": {
            "interval_seconds": 0.5,
            "output_format": "json",
            "graph_path": "",
            "max_workers": 4,
        },
        "snapshot": {
            "grouping_mask": "fx",
            "show_small": True,
        },
        "logging": {
            "level": "warning",
        },
    }


@pytest.fixture
def config_file(tmp_path, sample_config_data):
    """Write the sample configuration to a temporary config.toml."""
    import toml

    path = tmp_path / "config.toml"
    with open(path, "w") as f:
        toml.dump(sample_config_data, f)
    return path


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically reset the configuration singleton after each test."""
    yield

    from pssmon.config import DEFAULT_CONFIG_FILE_PATH, set_config_path

    set_config_path(DEFAULT_CONFIG_FILE_PATH)


# ============================================================================
# Mock Fixtures
# ============================================================================


def make_fake_process(pid: int, ppid: int, cmdline: List[str], error: Exception = None) -> MagicMock:
    """Create a psutil.Process stand-in for process_iter results."""
    proc = MagicMock(spec=psutil.Process)
    proc.pid = pid
    if error is not None:
        proc.ppid.side_effect = error
        proc.cmdline.side_effect = error
    else:
        proc.ppid.return_value = ppid
        proc.cmdline.return_value = cmdline
    return proc


@pytest.fixture
def fake_process():
    """Factory fixture for psutil.Process stand-ins."""
    return make_fake_process
