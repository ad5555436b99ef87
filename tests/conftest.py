import logging

import pytest

from helpers import make_event


@pytest.fixture
def ev():
    return make_event


@pytest.fixture
def clean_logging():
    yield
    logging.captureWarnings(False)
    for name in ("playstats", "py.warnings"):
        lg = logging.getLogger(name)
        for h in lg.handlers:
            h.close()
        lg.handlers.clear()
        lg.setLevel(logging.NOTSET)
