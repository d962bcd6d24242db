from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from ..models.batch import BatchProgress, OutputBatch
from ..models.record import InstrumentRecord, Party
from .attachments import AttachmentStore

"""Size-aware batch XML serializer.

Each record becomes one <instrument> fragment. Fragments are folded into
batches bounded by MAX_BATCH_SIZE (UTF-8 bytes, envelope included). A batch is
closed before a fragment that would push it over the limit, unless the batch
is still empty: a single oversized record always gets a batch of its own.

Envelope and element order are fixed by the filing schema and must stay
bit-exact.
"""

__all__ = [
    "MAX_BATCH_SIZE",
    "XML_HEADER",
    "XML_FOOTER",
    "SerializationError",
    "BatchState",
    "escape_xml",
    "render_instrument",
    "advance",
    "finalize_batch",
    "batch_filename",
    "iter_batches",
    "generate_batches",
    "estimate_total_size",
]

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 29 * 1024 * 1024

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n<bulkstamping>\n    <applicationType>43</applicationType>'
XML_FOOTER = "\n</bulkstamping>"
ENVELOPE_SIZE = len(XML_HEADER.encode("utf-8")) + len(XML_FOOTER.encode("utf-8"))

# Rough per-record XML size used for estimates only.
ESTIMATED_RECORD_SIZE = 3000

Resolver = Callable[[str], str]
ProgressSink = Callable[[BatchProgress], None]

# (XML tag, attribute) in schema order
_HEAD_FIELDS = (
    ("refNo", "ref_no"),
    ("instrumentDate", "instrument_date"),
    ("instrumentDateReceive", "instrument_date_receive"),
    ("principal", "principal"),
    ("subsidiary", "subsidiary"),
    ("typeOfInstrument", "type_of_instrument"),
    ("typeOfInstrumentOthers", "type_of_instrument_others"),
)

_PARTY_FIELDS = (
    ("type", "type"),
    ("name", "name"),
    ("nationality", "nationality"),
    ("icNo", "ic_no"),
    ("pasportNo", "passport_no"),
    ("pasportCountry", "passport_country"),
    ("rocNo", "roc_no"),
    ("busType", "bus_type"),
    ("incomeTaxNo", "income_tax_no"),
    ("incomeTaxBranch", "income_tax_branch"),
    ("street1", "street1"),
    ("street2", "street2"),
    ("street3", "street3"),
    ("postcode", "postcode"),
    ("city", "city"),
    ("state", "state"),
    ("country", "country"),
    ("telNo", "tel_no"),
    ("email", "email"),
)

_TAIL_FIELDS = (
    ("consideration", "consideration"),
    ("duration", "duration"),
    ("durationDesc", "duration_desc"),
    ("colLand", "col_land"),
    ("colLandDesc", "col_land_desc"),
    ("colShare", "col_share"),
    ("colDeposit", "col_deposit"),
    ("colOthers", "col_others"),
    ("colOthersDesc", "col_others_desc"),
    ("noOfCopy", "no_of_copy"),
    ("exemption", "exemption"),
    ("exemptionOthers", "exemption_others"),
    ("remession", "remission"),
    ("remessionOthers", "remission_others"),
)

_INDENT = "    "


class SerializationError(Exception):
    """Fatal serializer failure (aborts the run; finalized batches stay valid)."""


def escape_xml(value: Any) -> str:
    """Escape the five reserved XML characters. None renders as ""."""
    if value is None:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def _element(depth: int, tag: str, value: Any) -> str:
    return f"\n{_INDENT * depth}<{tag}>{escape_xml(value)}</{tag}>"


def _party_xml(tag: str, party: Party) -> str:
    parts = [f"\n{_INDENT * 2}<{tag}>"]
    parts.extend(_element(3, name, getattr(party, attr)) for name, attr in _PARTY_FIELDS)
    parts.append(f"\n{_INDENT * 2}</{tag}>")
    return "".join(parts)


def render_instrument(record: InstrumentRecord, attachment_data: str = "") -> str:
    """Render one <instrument> fragment.

    Every schema element is present even when empty. attachment_data is the
    base64 payload placed as the attachment element text.
    """
    parts = [f"\n{_INDENT}<instrument>"]
    parts.extend(_element(2, tag, getattr(record, attr)) for tag, attr in _HEAD_FIELDS)
    parts.append(_party_xml("transferor", record.transferor))
    parts.append(_party_xml("transferee", record.transferee))
    parts.extend(_element(2, tag, getattr(record, attr)) for tag, attr in _TAIL_FIELDS)
    name = escape_xml(record.attachment)
    parts.append(f'\n{_INDENT * 2}<attachment name="{name}">{attachment_data}</attachment>')
    parts.append(f"\n{_INDENT}</instrument>")
    return "".join(parts)


@dataclass(frozen=True)
class BatchState:
    """Running batch accumulator. Replaced, never mutated."""
    fragments: tuple[str, ...] = ()
    size: int = ENVELOPE_SIZE
    record_count: int = 0
    finalized: int = 0  # batches already emitted


def batch_filename(index: int) -> str:
    return "Output.xml" if index == 1 else f"Output_Batch_{index}.xml"


def finalize_batch(state: BatchState) -> OutputBatch:
    index = state.finalized + 1
    content = XML_HEADER + "".join(state.fragments) + XML_FOOTER
    return OutputBatch(
        filename=batch_filename(index),
        content=content,
        byte_size=len(content.encode("utf-8")),
        record_count=state.record_count,
        index=index,
    )


def advance(state: BatchState, fragment: str, max_batch_size: int = MAX_BATCH_SIZE) -> tuple[BatchState, OutputBatch | None]:
    """Fold one fragment into the running batch.

    Returns the new state and the batch closed by this step, if any.
    """
    fragment_size = len(fragment.encode("utf-8"))
    closed: OutputBatch | None = None
    if state.size + fragment_size > max_batch_size and state.record_count > 0:
        closed = finalize_batch(state)
        state = BatchState(finalized=state.finalized + 1)
    return (
        BatchState(
            fragments=state.fragments + (fragment,),
            size=state.size + fragment_size,
            record_count=state.record_count + 1,
            finalized=state.finalized,
        ),
        closed,
    )


def _percentage(current: int, total: int) -> int:
    # round half up
    return (current * 200 + total) // (2 * total)


def _attachment_data(record: InstrumentRecord, resolver: Resolver) -> str:
    if not record.attachment:
        return ""
    filename = record.attachment.strip()
    try:
        return resolver(filename) or ""
    except Exception as e:
        logger.warning("row=%d failed to read attachment %s: %s", record.row_number, filename, e)
        return ""


def iter_batches(
    records: Sequence[InstrumentRecord],
    resolver: Resolver,
    max_batch_size: int = MAX_BATCH_SIZE,
    progress: ProgressSink | None = None,
) -> Iterator[OutputBatch]:
    """Serialize records into batches, yielding each batch once finalized.

    Records keep their input order within and across batches. The caller may
    stop iterating at any point; nothing needs to be unwound.

    Args:
        records: Mapped records in input order
        resolver: filename -> base64 text ("" if unavailable)
        max_batch_size: Maximum batch size in bytes (envelope included)
        progress: Optional sink called after every record

    Raises:
        SerializationError: if resolver is not callable
    """
    if not callable(resolver):
        raise SerializationError("attachment resolver is not available")

    total = len(records)
    state = BatchState()
    for current, record in enumerate(records, start=1):
        fragment = render_instrument(record, _attachment_data(record, resolver))
        state, closed = advance(state, fragment, max_batch_size)
        if closed is not None:
            logger.debug("batch %s closed records=%d bytes=%d", closed.filename, closed.record_count, closed.byte_size)
            yield closed
        if progress is not None:
            progress(
                BatchProgress(
                    current=current,
                    total=total,
                    percentage=_percentage(current, total),
                    current_batch=state.finalized + 1,
                )
            )

    if state.record_count > 0:
        yield finalize_batch(state)


def generate_batches(
    records: Sequence[InstrumentRecord],
    resolver: Resolver,
    max_batch_size: int = MAX_BATCH_SIZE,
    progress: ProgressSink | None = None,
) -> list[OutputBatch]:
    return list(iter_batches(records, resolver, max_batch_size, progress))


def estimate_total_size(records: Sequence[InstrumentRecord], store: AttachmentStore) -> int:
    """Rough output size: envelope + fixed size per record + base64-inflated attachments."""
    total = ENVELOPE_SIZE + len(records) * ESTIMATED_RECORD_SIZE
    for record in records:
        if not record.attachment:
            continue
        name = record.attachment.strip()
        if store.has(name):
            total += math.ceil(store.size(name) * 1.37)
    return total
