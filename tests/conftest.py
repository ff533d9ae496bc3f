"""
Pytest configuration and shared fixtures for vmtray tests.

Provides an in-memory VM provider, a recording dialog presenter and a
stand-in for the libvirt module.
"""

import os
import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch
from pathlib import Path
from typing import Dict, List, Optional
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from common.dialogs import DialogPresenter
from vmtray.core.models import VMSnapshot
from vmtray.core.provider import Subscription, VMProvider
from vmtray.core.vm_state import StateChangeResponse, VMState, is_off, is_running, is_saved


# ============ Provider Fakes ============

class FakeSubscription(Subscription):
    """Subscription that records start/stop and can be told to fail."""

    def __init__(self, on_change, fail_with: Optional[Exception] = None):
        self.on_change = on_change
        self.fail_with = fail_with
        self.started = False
        self.stopped = False

    def start(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.started = True

    def stop(self) -> None:
        self.stopped = True


class FakeProvider(VMProvider):
    """
    In-memory provider with call counters.

    Set return_codes[name] to make requests for that VM answer with a
    given code; set fail_enumerate to make enumeration raise. With
    reject_ineligible set it refuses requests the way libvirt does: only
    start for stopped VMs, and graceful shutdown only for running ones.
    """

    def __init__(self, machines: Optional[Dict[str, VMState]] = None):
        self.machines: Dict[str, VMState] = dict(machines or {})
        self.return_codes: Dict[str, int] = {}
        self.shutdown_capable: Dict[str, bool] = {}
        self.fail_enumerate: Optional[Exception] = None
        self.subscribe_error: Optional[Exception] = None
        self.reject_ineligible = False
        self.subscriptions: List[FakeSubscription] = []
        self.enumerate_calls: List[Optional[str]] = []
        self.state_change_calls: List[tuple] = []
        self.locate_calls: List[str] = []
        self.shutdown_calls: List[tuple] = []

    @property
    def provider_calls(self) -> int:
        return (
            len(self.enumerate_calls) + len(self.state_change_calls)
            + len(self.locate_calls) + len(self.shutdown_calls)
        )

    def enumerate(self, name=None):
        self.enumerate_calls.append(name)
        if self.fail_enumerate is not None:
            raise self.fail_enumerate
        return [
            VMSnapshot(name=vm_name, state=state)
            for vm_name, state in sorted(self.machines.items())
            if name is None or vm_name == name
        ]

    def subscribe(self, on_change):
        subscription = FakeSubscription(on_change, self.subscribe_error)
        self.subscriptions.append(subscription)
        return subscription

    def request_state_change(self, name, state):
        self.state_change_calls.append((name, state))
        current = self.machines.get(name)
        if self.reject_ineligible and (is_off(current) or is_saved(current)) \
                and state is not VMState.ENABLED:
            return StateChangeResponse.INVALID_STATE.value
        code = self.return_codes.get(name, StateChangeResponse.COMPLETED_WITH_NO_ERROR.value)
        if code == StateChangeResponse.COMPLETED_WITH_NO_ERROR.value:
            self.machines[name] = state
        return code

    def locate_shutdown_capability(self, name):
        self.locate_calls.append(name)
        if self.reject_ineligible and not is_running(self.machines.get(name)):
            return None
        if not self.shutdown_capable.get(name, True):
            return None
        return SimpleNamespace(name=name)

    def invoke_shutdown(self, capability, force, reason):
        self.shutdown_calls.append((capability.name, force, reason))
        return self.return_codes.get(capability.name, StateChangeResponse.TRANSITION_STARTED.value)


class RecordingPresenter(DialogPresenter):
    """Presenter that answers confirmations from a flag and records everything."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.prompts = []
        self.errors = []

    def confirm(self, prompt) -> bool:
        self.prompts.append(prompt)
        return self.answer

    def show_error(self, heading: str, text: str = "") -> None:
        self.errors.append((heading, text))


@pytest.fixture
def provider() -> FakeProvider:
    """Provider with one VM in each interesting state."""
    return FakeProvider({
        "Alpha": VMState.ENABLED,
        "Beta": VMState.DISABLED,
        "Gamma": VMState.QUIESCE,
        "Delta": VMState.OFFLINE,
    })


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter(answer=True)


@pytest.fixture
def declining_presenter() -> RecordingPresenter:
    return RecordingPresenter(answer=False)


# ============ Libvirt Fixtures ============

class FakeLibvirtError(Exception):
    """Stand-in for libvirt.libvirtError."""

    def __init__(self, msg: str, code: int = 1):
        super().__init__(msg)
        self._code = code

    def get_error_code(self) -> int:
        return self._code


@pytest.fixture
def fake_libvirt():
    """
    Replace the libvirt module used by vmtray with a mock carrying a real
    exception class and the error codes vmtray checks.
    """
    module = MagicMock()
    module.libvirtError = FakeLibvirtError
    module.VIR_ERR_OPERATION_INVALID = 55
    module.VIR_ERR_NO_SUPPORT = 3
    module.VIR_ERR_OPERATION_UNSUPPORTED = 84
    module.VIR_ERR_OPERATION_DENIED = 39
    module.VIR_ERR_AUTH_FAILED = 45
    module.VIR_ERR_OPERATION_TIMEOUT = 68
    module.VIR_ERR_NO_DOMAIN = 42

    with patch("vmtray.core.connection.libvirt", module), \
            patch("vmtray.core.connection.LIBVIRT_AVAILABLE", True), \
            patch("vmtray.core.libvirt_provider.libvirt", module):
        yield module


@pytest.fixture
def mock_domain():
    """Mock libvirt domain."""
    domain = MagicMock()
    domain.name.return_value = "test-vm"
    domain.state.return_value = (1, 0)  # Running
    domain.hasManagedSaveImage.return_value = 0
    return domain


# ============ Environment Fixtures ============

@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Provide temporary config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep VMTRAY_* variables from the developer's shell out of tests."""
    for var in list(os.environ):
        if var.startswith("VMTRAY_"):
            monkeypatch.delenv(var, raising=False)


# ============ Marker Configuration ============

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "requires_libvirt: marks tests that need libvirt running"
    )
    config.addinivalue_line(
        "markers", "unit: fast unit tests with no external deps"
    )


def pytest_collection_modifyitems(config, items):
    """Skip tests based on environment."""
    skip_libvirt = pytest.mark.skip(reason="Requires libvirt daemon")

    for item in items:
        # Skip libvirt tests if daemon not running
        if "requires_libvirt" in item.keywords:
            try:
                import libvirt
                conn = libvirt.open("qemu:///session")
                if conn:
                    conn.close()
            except Exception:
                item.add_marker(skip_libvirt)
