"""Shared test fixtures."""

from __future__ import annotations

import copy
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt5 import QtWidgets

from keeper.config import DEFAULTS

PEACE_TEXT = "I am at peace"
PEACE_HEX = "7d2cb5f65b118dae5605f1629afb9aacb87f42301800e34bb9c783ec6a343297"
PEACE_SPACE_HEX = "5af39222a333e5db6fc1a2b0d4931326fe6da5a2892a8ed272fd63bf74ce5abb"
EMPTY_HEX = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
ABC_HEX = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

ZERO_DIGEST = bytes(32)
FULL_DIGEST = bytes([0xFF] * 32)


@pytest.fixture(scope="session")
def qapp():
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app


@pytest.fixture(autouse=True)
def keeper_home(tmp_path, monkeypatch):
    home = tmp_path / "keeper-home"
    monkeypatch.setenv("KEEPER_HOME", str(home))
    return home


@pytest.fixture
def config():
    return copy.deepcopy(DEFAULTS)


@pytest.fixture
def sample_digests():
    import hashlib

    return [hashlib.sha256(str(i).encode("utf-8")).digest() for i in range(200)] + [ZERO_DIGEST, FULL_DIGEST]
