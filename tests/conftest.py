import base64
import io
import json
import os
import sys

import pytest

from simulator_client import ClientBuilder, SimulatorClient

FAKE_SIMULATOR = os.path.join(os.path.dirname(__file__), "fake_simulator.py")


def reply_line(index, payload=b"", error=None, result_id=None, msg=None, timestamp=1700000000):
    """One reply line in the simulator's wire format."""
    return (json.dumps({
        "id": index,
        "error": error,
        "result": {
            "id": result_id,
            "msg": msg,
            "timestamp": timestamp,
            "response": base64.b64encode(payload).decode("ascii"),
        },
    }) + "\n").encode("utf-8")


def borsh_reply_line(index, schema, value, **kwargs):
    return reply_line(index, schema.build(value), **kwargs)


class _KeepOpenBytesIO(io.BytesIO):
    """BytesIO whose contents stay readable after close()."""

    def close(self):
        self.closed_by_client = True


@pytest.fixture
def make_client():
    """Build a SimulatorClient over in-memory streams; returns (client, writer)."""

    def _make(*lines):
        writer = _KeepOpenBytesIO()
        reader = io.BytesIO(b"".join(lines))
        return SimulatorClient(writer, reader), writer

    return _make


@pytest.fixture
def fake_simulator():
    return ClientBuilder(path=FAKE_SIMULATOR, command_prefix=[sys.executable])
