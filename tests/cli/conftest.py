import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The runner reconfigures the root logger; put pytest's handlers back."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
