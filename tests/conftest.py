import logging

import pytest
import stereodelay as sdl
from stereodelay.logger import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def _restore_config():
    sdl.set_error_mode(sdl.ErrorMode.STRICT)
    sdl.set_sample_rate(44100)
    yield
    sdl.set_error_mode(sdl.ErrorMode.STRICT)
    sdl.set_sample_rate(44100)
    # The CLI sets the package logger level; don't let it hide later records
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.NOTSET)
