"""Shared fixtures for the segtrip test suite."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_segtrip_logging():
    """Drop handlers and levels the CLI installs on the package logger."""
    yield
    logger = logging.getLogger("segtrip")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
