import logging

import pytest


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Drop handlers added by the CLI's setup_logging between tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
