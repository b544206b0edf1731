import logging

import pytest

from bedrock_tools.config import get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache(monkeypatch):
    for var in (
        "BEDROCK_MODEL_ID_MAP_JSON",
        "BEDROCK_NOVA_MODEL_ID",
        "BEDROCK_CONVERSE_MODEL_ID",
        "BEDROCK_TOOLS_LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_logger():
    # setup_logging binds handlers to the streams pytest swaps per test
    logger = logging.getLogger("bedrock_tools")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
