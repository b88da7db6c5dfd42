"""
Unit tests for WhatsApp chunking and the chunked sender.

Ensures:
1. No chunk exceeds the character budget
2. Row blocks are never split and appear exactly once, in order
3. Chunks are sent in order with pacing between sends
4. A failed send stops the remaining chunks
"""
import re
from unittest.mock import AsyncMock, call

import pytest

from visitreport.core.exceptions import DeliveryError
from visitreport.services.delivery.whatsapp import WhatsAppSender, format_whatsapp_number
from visitreport.services.reports.chat import (
    build_chat_message,
    format_header,
    format_summary,
    format_visit_block,
    split_into_chunks,
)
from visitreport.services.reports.summary import StatusSummary

from tests.conftest import IST, NOW, make_visit

BLOCK_START = re.compile(r"^\*#\d+\*$", re.MULTILINE)


def visits(count):
    return [make_visit(i, hours_ago=i % 20) for i in range(1, count + 1)]


def five_row_budget(rows, labels):
    """Budget that fits the part-1 header plus exactly five (widest) blocks."""
    widest = max(len(format_visit_block(i, row)) for i, row in enumerate(rows))
    return len(format_header(labels, NOW, IST, part=1)) + 5 * widest + 5


def extract_blocks(chunks):
    blocks = []
    for chunk in chunks:
        starts = [match.start() for match in BLOCK_START.finditer(chunk)]
        for position, start in enumerate(starts):
            end = starts[position + 1] if position + 1 < len(starts) else None
            block = chunk[start:end]
            if end is None and "📈" in block:
                block = block[:block.index("📈")]
            blocks.append(block)
    return blocks


def test_short_report_is_one_chunk(labels):
    rows = visits(2)

    chunks = split_into_chunks(rows, labels, NOW, IST, max_length=1500)

    assert chunks == [build_chat_message(rows, labels, NOW, IST)]


@pytest.mark.parametrize("count,budget", [(6, 600), (12, 700), (30, 1500), (40, 400)])
def test_chunks_respect_budget_and_keep_blocks_whole(labels, count, budget):
    rows = visits(count)

    chunks = split_into_chunks(rows, labels, NOW, IST, max_length=budget)

    assert len(chunks) > 1
    assert all(len(chunk) <= budget for chunk in chunks)
    assert extract_blocks(chunks) == [format_visit_block(i, row) for i, row in enumerate(rows)]


def test_part_headers_and_summary_placement(labels):
    rows = visits(12)
    summary = format_summary(StatusSummary.from_rows(rows), labels)

    chunks = split_into_chunks(rows, labels, NOW, IST, max_length=five_row_budget(rows, labels))

    assert len(chunks) == 3
    assert chunks[0].startswith("📊 *Visit Report (Last 24 Hours - Part 1)*\nGenerated: ")
    assert chunks[1].startswith("Visit Report (Last 24 Hours - Part 2)\n📅 *Sorted by Date (Latest First)*\n\n")
    assert chunks[2].startswith("Visit Report (Last 24 Hours - Part 3)")
    assert chunks[2].endswith(summary)
    assert all(summary not in chunk for chunk in chunks[:2])
    assert [len(BLOCK_START.findall(chunk)) for chunk in chunks] == [5, 5, 2]


def test_summary_moves_to_new_part_when_last_part_is_full(labels):
    rows = visits(10)
    budget = five_row_budget(rows, labels)

    chunks = split_into_chunks(rows, labels, NOW, IST, max_length=budget)

    assert all(len(chunk) <= budget for chunk in chunks)
    assert len(chunks) == 3
    assert BLOCK_START.findall(chunks[2]) == []
    assert "📈 *Summary (Last 24 Hours)*" in chunks[2]


def test_oversized_block_is_truncated_to_budget(labels):
    rows = [make_visit(1, remark="x" * 800), make_visit(2)]

    chunks = split_into_chunks(rows, labels, NOW, IST, max_length=500)

    assert all(len(chunk) <= 500 for chunk in chunks)
    assert "…" in chunks[0]
    assert "Visitor Name: Visitor 02" in "".join(chunks)


def test_budget_too_small_raises(labels):
    with pytest.raises(ValueError):
        split_into_chunks(visits(3), labels, NOW, IST, max_length=120)


def test_whatsapp_prefix():
    assert format_whatsapp_number("+919999999999") == "whatsapp:+919999999999"
    assert format_whatsapp_number(" whatsapp:+1555 ") == "whatsapp:+1555"


@pytest.mark.asyncio
async def test_single_message_send(whatsapp_sender, messaging_client, sleep, labels):
    rows = visits(2)

    result = await whatsapp_sender.send_report("+919999999999", rows, labels, NOW, IST)

    assert result.success
    assert result.message_id == "SM001"
    assert result.message_ids is None
    assert result.visits_count == 2
    messaging_client.create_message.assert_awaited_once_with(
        "whatsapp:+14155238886",
        "whatsapp:+919999999999",
        build_chat_message(rows, labels, NOW, IST),
    )
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_twelve_rows_go_out_as_three_paced_chunks(messaging_client, sleep, labels):
    rows = visits(12)
    sender = WhatsAppSender(
        messaging_client,
        from_number="whatsapp:+14155238886",
        max_length=five_row_budget(rows, labels),
        pacing_seconds=2.0,
        sleep=sleep,
    )

    result = await sender.send_report("+919999999999", rows, labels, NOW, IST)

    assert result.message_ids == ["SM001", "SM002", "SM003"]
    assert result.message_id is None
    assert result.visits_count == 12
    assert messaging_client.create_message.await_count == 3
    assert sleep.await_args_list == [call(2.0), call(2.0)]

    bodies = [sent.args[2] for sent in messaging_client.create_message.await_args_list]
    assert "Part 1" in bodies[0] and "Part 2" in bodies[1] and "Part 3" in bodies[2]


@pytest.mark.asyncio
async def test_failed_chunk_aborts_remaining_sends(sleep, labels):
    rows = visits(12)
    client = AsyncMock()
    client.create_message = AsyncMock(side_effect=["SM001", DeliveryError("whatsapp", "rate limited"), "SM003"])
    sender = WhatsAppSender(
        client,
        from_number="whatsapp:+14155238886",
        max_length=five_row_budget(rows, labels),
        sleep=sleep,
    )

    with pytest.raises(DeliveryError):
        await sender.send_report("+919999999999", rows, labels, NOW, IST)

    assert client.create_message.await_count == 2


@pytest.mark.asyncio
async def test_empty_rows_send_no_data_notice(whatsapp_sender, messaging_client, labels):
    result = await whatsapp_sender.send_report("+919999999999", [], labels, NOW, IST)

    assert result.visits_count == 0
    assert result.message_id == "SM001"
    body = messaging_client.create_message.await_args.args[2]
    assert "No visits recorded" in body


@pytest.mark.asyncio
async def test_missing_sender_identity_raises(messaging_client, labels):
    sender = WhatsAppSender(messaging_client, from_number=None)

    with pytest.raises(DeliveryError, match="sender"):
        await sender.send_report("+919999999999", visits(1), labels, NOW, IST)

    messaging_client.create_message.assert_not_awaited()
