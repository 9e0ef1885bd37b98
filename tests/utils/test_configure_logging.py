# tests/utils/test_configure_logging.py
import logging

import pytest

from mdlinkcheck.utils.configure_logging import LogWithTqdm, configure_logger


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler, LogWithTqdm):
            root.removeHandler(handler)
    root.setLevel(level)
    logging.getLogger("aiohttp").setLevel(logging.NOTSET)


def test_configure_logger_installs_tqdm_handler(restore_root_logger, capsys):
    configure_logger(
        "INFO",
        module_specific_levels={"mdlinkcheck.test": "DEBUG"},
        silenced_loggers={"aiohttp": "ERROR"},
    )

    root = logging.getLogger()
    assert root.level == logging.INFO
    assert len(root.handlers) == 1 and isinstance(root.handlers[0], LogWithTqdm)
    assert logging.getLogger("mdlinkcheck.test").level == logging.DEBUG
    assert logging.getLogger("aiohttp").level == logging.ERROR

    logging.getLogger("mdlinkcheck.test").info("hello from the checker")
    assert "INFO - [mdlinkcheck.test:" in capsys.readouterr().err


def test_unknown_level_falls_back(restore_root_logger):
    configure_logger("LOUD")
    assert logging.getLogger().level == logging.WARNING
