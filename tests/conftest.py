"""Shared fixtures for pcareg tests."""

import logging

import pytest

from pcareg.config import Configuration


class RecordingConfiguration(Configuration):
    """Configuration that remembers every read_parameter call"""

    def __init__(self, parameters=None):
        super().__init__(parameters)
        self.calls = []

    def read_parameter(self, key, component_label=None, entry_index=0, default_entry_index=0,
                       default=None, lenient=False):
        self.calls.append((key, entry_index, default_entry_index, lenient))
        return super().read_parameter(
            key, component_label, entry_index, default_entry_index, default, lenient
        )

    def calls_for(self, key):
        return [call for call in self.calls if call[0] == key]


class CapturingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


@pytest.fixture
def recording_configuration():
    return RecordingConfiguration


@pytest.fixture
def capturing_logger():
    """Isolated logger whose messages end up in logger.handler.messages"""
    logger = logging.getLogger("pcareg.tests.capture")
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = CapturingHandler()
    logger.addHandler(handler)
    logger.handler = handler
    yield logger
    logger.handlers.clear()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging so they do not outlive a test"""
    yield
    logger = logging.getLogger("pcareg")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
