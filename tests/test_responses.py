import base64
import json
import struct
from dataclasses import dataclass

import pytest
from borsh_construct import U8, U64, CStruct, String, Vec
from pydantic import BaseModel

from simulator_client import PlanResponse, StepBinaryFormatError, StepFormatError
from simulator_client.protocol import decode_response

from conftest import borsh_reply_line, reply_line


class Balance(BaseModel):
    owner: str
    amount: int


@dataclass
class Point:
    x: int
    y: int


# ---------------------------------------------------------------------------
# Untyped decoding
# ---------------------------------------------------------------------------

def test_decode_nested_reply():
    line = reply_line(3, b"\x01\x02\xff", error=None, result_id="tx", msg="ok", timestamp=12)
    response = decode_response(line)

    assert response.base.id == 3
    assert response.base.error is None
    assert response.ok
    assert response.result.id == "tx"
    assert response.result.msg == "ok"
    assert response.result.timestamp == 12
    assert response.result.response == b"\x01\x02\xff"


def test_decode_flattened_reply():
    line = json.dumps({
        "id": 1,
        "error": "boom",
        "msg": None,
        "timestamp": 5,
        "response": base64.b64encode(b"abc").decode(),
    })
    response = decode_response(line)

    assert response.base.id == 1
    assert response.base.error == "boom"
    assert not response.ok
    assert response.result.id is None
    assert response.result.response == b"abc"


def test_decode_is_idempotent():
    payload = bytes(range(256))
    line = reply_line(0, payload)
    first = decode_response(line)
    second = decode_response(line)
    assert first.result.response == second.result.response == payload
    assert decode_response(json.dumps(first.to_wire())) == first


def test_missing_response_is_empty_bytes():
    line = json.dumps({"id": 0, "error": None, "result": {"timestamp": 1, "response": None}})
    assert decode_response(line).result.response == b""


def test_balance_is_kept():
    line = json.dumps({"id": 0, "result": {"timestamp": 1, "response": "", "balance": 99}})
    assert decode_response(line).result.balance == 99


@pytest.mark.parametrize("line", [
    b"not json\n",
    b"[1, 2, 3]\n",
    b'{"error": null, "result": {"timestamp": 1, "response": ""}}\n',
    b'{"id": 0, "result": {"response": ""}}\n',
    b'{"id": 0, "result": {"timestamp": 1, "response": "***"}}\n',
    b'{"id": 0, "result": {"timestamp": 1, "response": 42}}\n',
    b"\xff\xfe\n",
])
def test_malformed_replies_are_format_errors(line):
    with pytest.raises(StepFormatError):
        decode_response(line)


# ---------------------------------------------------------------------------
# Typed decoding
# ---------------------------------------------------------------------------

BALANCE = CStruct("owner" / String, "amount" / U64)


def test_into_typed_u64():
    response = decode_response(reply_line(0, struct.pack("<Q", 42), msg="hi", timestamp=7))
    typed = response.into_typed(U64)

    assert typed.result.response == 42
    assert typed.result.msg == "hi"
    assert typed.result.timestamp == 7
    assert typed.base == response.base


def test_into_typed_string():
    response = decode_response(reply_line(0, b"\x02\x00\x00\x00hi"))
    assert response.into_typed(String).result.response == "hi"


def test_into_typed_struct_is_plain_dict():
    response = decode_response(borsh_reply_line(0, BALANCE, {"owner": "alice", "amount": 10}))
    assert response.into_typed(BALANCE).result.response == {"owner": "alice", "amount": 10}


def test_into_typed_model():
    response = decode_response(borsh_reply_line(0, BALANCE, {"owner": "alice", "amount": 10}))
    typed = response.into_typed(BALANCE, Balance)
    assert typed.result.response == Balance(owner="alice", amount=10)


def test_into_typed_dataclass_and_vec():
    point = CStruct("x" / U8, "y" / U8)
    response = decode_response(reply_line(0, b"\x01\x02"))
    assert response.into_typed(point, Point).result.response == Point(x=1, y=2)

    response = decode_response(borsh_reply_line(0, Vec(U64), [1, 2, 3]))
    assert response.into_typed(Vec(U64)).result.response == [1, 2, 3]


def test_typed_layout_mismatch_is_binary_format_error():
    payload = struct.pack("<Q", 42)
    response = decode_response(reply_line(0, payload))

    with pytest.raises(StepBinaryFormatError) as excinfo:
        response.into_typed(BALANCE)
    assert excinfo.value.cause is not None
    # the untyped view of the same reply is still usable
    assert response.result.response == payload


def test_typed_short_payload_is_binary_format_error():
    response = decode_response(reply_line(0, b"\x01\x02"))
    with pytest.raises(StepBinaryFormatError):
        response.into_typed(U64)


def test_typed_trailing_bytes_are_rejected():
    response = decode_response(reply_line(0, struct.pack("<Q", 1) + b"\x00"))
    with pytest.raises(StepBinaryFormatError):
        response.into_typed(U64)


def test_typed_model_mismatch_is_binary_format_error():
    response = decode_response(reply_line(0, struct.pack("<Q", 1)))
    with pytest.raises(StepBinaryFormatError):
        response.into_typed(CStruct("x" / U64), Balance)


def test_plan_response_is_immutable():
    response = decode_response(reply_line(0))
    assert isinstance(response, PlanResponse)
    with pytest.raises(Exception):
        response.base = None
