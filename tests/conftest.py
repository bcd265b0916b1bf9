import logging
import socket

import pytest

from helloapp.logging_conf import JsonFormatter


@pytest.fixture
def free_port():
    """A concrete loopback port that nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def json_root_logger():
    """Undo setup_logging(): drop its stdout handler and restore the root level."""
    root = logging.getLogger()
    level = root.level
    yield root
    for h in list(root.handlers):
        if isinstance(h.formatter, JsonFormatter):
            root.removeHandler(h)
    root.setLevel(level)
