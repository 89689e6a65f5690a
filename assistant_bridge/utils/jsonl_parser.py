"""JSONL stream parsing utilities."""

import asyncio
import json
from typing import AsyncIterator

from pydantic import ValidationError

from ..errors import ProtocolDecodeError
from ..models.message import ProtocolMessage

READ_CHUNK_SIZE = 64 * 1024


async def iter_lines(
    stream: asyncio.StreamReader,
    chunk_size: int = READ_CHUNK_SIZE
) -> AsyncIterator[str]:
    """
    Yield newline-delimited lines from a stream.

    StreamReader.readline() fails on lines longer than the reader's limit;
    this reads fixed-size chunks instead, so a line can be any length.

    Args:
        stream: Stream to read, typically a subprocess stdout
        chunk_size: Bytes per read

    Yields:
        Lines without their trailing newline, including a final
        unterminated line
    """
    buffer = b""
    while True:
        chunk = await stream.read(chunk_size)
        if not chunk:
            break
        buffer += chunk
        while True:
            newline = buffer.find(b"\n")
            if newline < 0:
                break
            line, buffer = buffer[:newline], buffer[newline + 1:]
            yield line.decode("utf-8", errors="replace").rstrip("\r")

    if buffer:
        yield buffer.decode("utf-8", errors="replace").rstrip("\r")


def decode_protocol_line(line: str) -> ProtocolMessage:
    """
    Decode a single stream-json line.

    Args:
        line: A non-empty line of JSON

    Returns:
        Decoded protocol message

    Raises:
        ProtocolDecodeError: If the line is not a JSON object with a string type
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ProtocolDecodeError(line, str(e)) from e

    if not isinstance(data, dict):
        raise ProtocolDecodeError(line, f"expected a JSON object, got {type(data).__name__}")

    try:
        return ProtocolMessage.model_validate(data)
    except ValidationError as e:
        raise ProtocolDecodeError(line, str(e)) from e
