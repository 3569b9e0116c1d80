"""Test fake implementations for dependency injection testing."""

from tests.unit.fakes.fake_directory import FakeInstanceDirectory
from tests.unit.fakes.fake_prompt import FakePrompt
from tests.unit.fakes.fake_session import FakeSessionBroker

__all__ = ["FakeInstanceDirectory", "FakePrompt", "FakeSessionBroker"]
