import asyncio
import io
import json

import pytest

from qapplet.services.parent_channel import ParentChannel


@pytest.mark.asyncio
async def test_serve_feeds_non_blank_lines_until_eof():
    received = []

    async def handler(line):
        received.append(line)

    channel = ParentChannel(input_stream=io.StringIO('{"type": "POLL"}\n\n   \n{"type": "PAUSE"}\n'))
    await asyncio.wait_for(channel.serve(handler), timeout=2.0)

    assert received == ['{"type": "POLL"}', '{"type": "PAUSE"}']
    assert channel.disconnected.is_set()


@pytest.mark.asyncio
async def test_empty_input_disconnects_immediately():
    async def handler(line):
        raise AssertionError("no lines expected")

    channel = ParentChannel(input_stream=io.StringIO(""))
    await asyncio.wait_for(channel.serve(handler), timeout=2.0)
    assert channel.disconnected.is_set()


def test_send_writes_one_json_line():
    out = io.StringIO()
    channel = ParentChannel(input_stream=io.StringIO(""), output_stream=out)

    channel.send({"status": "success", "data": {"type": "OPTIONS", "options": ["a"]}})
    channel.send({"status": "error"})

    lines = out.getvalue().splitlines()
    assert len(lines) == 2
    assert json.loads(lines[0])["data"]["options"] == ["a"]
