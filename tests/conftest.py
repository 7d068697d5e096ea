"""Shared test fixtures."""

import shutil
import tempfile

import pytest

from PBRBridge.config import ConverterConfig


@pytest.fixture
def tmp_dir():
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def default_config():
    config = ConverterConfig()
    config.batch.show_progress = False
    return config
