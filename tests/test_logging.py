# tests/test_logging.py

from __future__ import annotations

import logging

from family_graph.logging import get_logger


def test_short_and_full_names_share_a_logger():
    short = get_logger("tests.naming")
    full = get_logger("family_graph.tests.naming")

    assert short is full
    assert short.name == "family_graph.tests.naming"
    assert short.propagate


def test_module_file_handler_is_attached_once():
    for _ in range(3):
        logger = get_logger("tests.handlers")

    module_handlers = [h for h in logger.handlers if getattr(h, "family_graph_module", False)]
    assert len(module_handlers) == 1
    assert module_handlers[0].baseFilename.endswith("family_graph_tests_handlers.log")


def test_namespace_root_owns_console_and_master_file():
    root = get_logger()

    assert root.name == "family_graph"
    assert not root.propagate
    assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
    assert any(type(h) is logging.StreamHandler for h in root.handlers)
