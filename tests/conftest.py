import logging

import pytest

from deliberate_thinking.core.log import ROOT_LOGGER


@pytest.fixture(autouse=True)
def _drop_log_handlers():
    # CLI runs attach a handler to the runner's stderr, which is closed once the run ends.
    yield
    logging.getLogger(ROOT_LOGGER).handlers.clear()
