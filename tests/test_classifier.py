"""Tests for text/opaque classification."""

from pathlib import Path

import pytest

from server_sync.core.errors import SourceReadError
from server_sync.core.models import Context
from server_sync.sync.classifier import classify


@pytest.fixture
def context(tmp_path):
    root = tmp_path / "ctx"
    root.mkdir()
    return Context(name="web", source_root=root)


def test_utf8_source_is_text(context, dest, write):
    write(context.source_root / "etc" / "app.conf", "host={{server_name}}\n")
    record = classify(context, Path("etc/app.conf"), dest)
    assert record.is_text
    assert record.text == "host={{server_name}}\n"
    assert record.absolute_destination == dest / "etc" / "app.conf"
    assert record.absolute_source == context.source_root / "etc" / "app.conf"


def test_invalid_utf8_is_opaque(context, dest, write):
    write(context.source_root / "bin" / "blob", b"\x00\xff\x80{{x}}")
    record = classify(context, Path("bin/blob"), dest)
    assert not record.is_text
    assert record.source_bytes == b"\x00\xff\x80{{x}}"


def test_destination_not_consulted(context, dest, write):
    write(context.source_root / "f", "text")
    write(dest / "f", b"\xff\xfe")
    assert classify(context, Path("f"), dest).is_text


def test_unreadable_source(context, dest):
    with pytest.raises(SourceReadError):
        classify(context, Path("missing"), dest)
