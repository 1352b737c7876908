from __future__ import annotations

import logging

import pytest

from pdfrestruct.backends import PypdfBackend
from pdfrestruct.geometry import reconcile_page_size
from pdfrestruct.types import PageGeometry, PageSizePolicy


class BrokenSource:
    page_count = 1

    def page_geometry(self, index: int) -> PageGeometry:
        raise RuntimeError("unreadable media box")


@pytest.fixture()
def sources(pdf_factory):
    backend = PypdfBackend()
    documents = [
        backend.decode(pdf_factory([(100, 100), (900, 900)])),
        backend.decode(pdf_factory(0)),
        backend.decode(pdf_factory([(300, 400)])),
        backend.decode(pdf_factory([(400, 300)])),
    ]
    yield documents
    for document in documents:
        document.close()


def test_keep_original_returns_none(sources) -> None:
    assert reconcile_page_size(sources, PageSizePolicy.KEEP_ORIGINAL) is None


def test_a4_policy(sources) -> None:
    geometry = reconcile_page_size(sources, "a4")
    assert (geometry.width, geometry.height) == (595.0, 842.0)


def test_use_first_inspects_first_page_only(sources) -> None:
    assert reconcile_page_size(sources, PageSizePolicy.USE_FIRST) == PageGeometry(100.0, 100.0)


def test_use_largest_prefers_earliest_on_ties(sources) -> None:
    assert reconcile_page_size(sources, PageSizePolicy.USE_LARGEST) == PageGeometry(300.0, 400.0)


def test_no_pages_yields_none(pdf_factory) -> None:
    with PypdfBackend().decode(pdf_factory(0)) as empty:
        assert reconcile_page_size([empty], PageSizePolicy.USE_LARGEST) is None


def test_scan_failure_falls_back_to_a4(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="pdfrestruct.geometry"):
        geometry = reconcile_page_size([BrokenSource()], PageSizePolicy.USE_FIRST)
    assert geometry == PageGeometry.a4()
    assert "using A4" in caplog.text


def test_unknown_policy_rejected(sources) -> None:
    with pytest.raises(ValueError):
        reconcile_page_size(sources, "LETTER")
