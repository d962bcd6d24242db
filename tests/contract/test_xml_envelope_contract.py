from __future__ import annotations

from stamps_bulk.services.serializer import XML_FOOTER, XML_HEADER, generate_batches

"""Envelope contract: the receiving system compares header and footer byte for byte."""

EXPECTED_HEADER = (
    b'<?xml version="1.0" encoding="UTF-8"?>\n'
    b"<bulkstamping>\n"
    b"    <applicationType>43</applicationType>"
)
EXPECTED_FOOTER = b"\n</bulkstamping>"


def test_envelope_constants_are_exact():
    assert XML_HEADER.encode("utf-8") == EXPECTED_HEADER
    assert XML_FOOTER.encode("utf-8") == EXPECTED_FOOTER


def test_every_batch_is_wrapped(record_factory):
    records = [record_factory(row_number=i + 2, ref_no=f"REF{i:03d}") for i in range(3)]
    for batch in generate_batches(records, lambda _n: "", max_batch_size=10):
        data = batch.content.encode("utf-8")
        assert data.startswith(EXPECTED_HEADER + b"\n    <instrument>")
        assert data.endswith(b"\n    </instrument>" + EXPECTED_FOOTER)
        assert data.count(b"<applicationType>") == 1
