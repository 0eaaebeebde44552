# Copyright (C) 2026 Frederik Pasch
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# SPDX-License-Identifier: Apache-2.0

"""
Simulator replies.

Reply format (one JSON object per line):
  { "id": <step index>, "error": <str|null>,
    "result": { "id": <str|null>, "msg": <str|null>, "timestamp": <u64>,
                "response": <base64>, "balance": <u64, optional> } }

The flattened variant, with the result fields next to "id" and "error", is
accepted as well; the result id is then absent.

PlanResponse keeps the payload as raw bytes. PlanResponse.into_typed() is a
separate, fallible step that parses those bytes with a caller supplied borsh
schema (the layout the simulator's programs serialize their results in) and
optionally validates the parsed value as a pydantic model or dataclass.
"""

import base64
import io
from typing import Any, Optional

from construct.core import ConstructError
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator

from simulator_client.errors import StepBinaryFormatError

_RESULT_FIELDS = ("msg", "timestamp", "response", "balance")


class BaseResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="Index of the step that produced the reply.")
    error: Optional[str] = Field(None, description="Error reported by the simulator, if any.")


class PlanResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(None, description="Id created by the step, e.g. a transaction id.")
    msg: Optional[str] = None
    timestamp: int = Field(..., ge=0)
    response: bytes = Field(b"", description="Raw payload returned by the called function.")
    balance: Optional[int] = Field(None, ge=0, description="Remaining units after an execute step.")

    @field_validator("response", mode="before")
    @classmethod
    def _decode_base64(cls, value):
        if value is None:
            return b""
        if isinstance(value, bytes):
            return value
        if not isinstance(value, str):
            raise ValueError("response must be a base64 string")
        return base64.b64decode(value, validate=True)


class PlanResultTyped(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    msg: Optional[str] = None
    timestamp: int
    response: Any = Field(..., description="Payload unpacked into the requested type.")
    balance: Optional[int] = None


class PlanResponseTyped(BaseModel):
    model_config = ConfigDict(frozen=True)

    base: BaseResponse
    result: PlanResultTyped

    @property
    def ok(self) -> bool:
        return self.base.error is None


class PlanResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    base: BaseResponse
    result: PlanResult

    @model_validator(mode="before")
    @classmethod
    def _split_wire_object(cls, data):
        if not isinstance(data, dict) or "base" in data:
            return data
        base = {"id": data.get("id"), "error": data.get("error")}
        if "result" in data:
            result = data["result"]
        else:
            result = {name: data[name] for name in _RESULT_FIELDS if name in data}
        return {"base": base, "result": result}

    @property
    def ok(self) -> bool:
        """False when the simulator reported an error for this step."""
        return self.base.error is None

    def into_typed(self, schema, model=None) -> PlanResponseTyped:
        """Parse the payload with the borsh *schema*, e.g. ``U64`` or a ``CStruct``.

        If *model* is given the parsed value is validated into it. Raises
        StepBinaryFormatError when the bytes do not fit the schema or the
        model. The untyped response is unaffected.
        """
        result = self.result
        typed = PlanResultTyped(
            id=result.id,
            msg=result.msg,
            timestamp=result.timestamp,
            response=unpack_payload(result.response, schema, model),
            balance=result.balance,
        )
        return PlanResponseTyped(base=self.base, result=typed)

    def to_wire(self) -> dict:
        """JSON-compatible form with the payload re-encoded as base64."""
        result = self.result.model_dump()
        result["response"] = base64.b64encode(self.result.response).decode("ascii")
        return {"id": self.base.id, "error": self.base.error, "result": result}


def _plain(value):
    # parsed structs are Containers that also carry private keys such as "_io"
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items() if not (isinstance(k, str) and k.startswith("_"))}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def unpack_payload(data: bytes, schema, model=None) -> Any:
    """Parse borsh *data* with *schema*, all bytes must be consumed."""
    stream = io.BytesIO(data)
    try:
        value = schema.parse_stream(stream)
    except (ConstructError, ValueError) as exc:
        raise StepBinaryFormatError(f"Borsh deserialization error: {exc}", exc) from exc
    trailing = len(data) - stream.tell()
    if trailing:
        raise StepBinaryFormatError(f"Borsh deserialization error: {trailing} trailing byte(s)")
    value = _plain(value)
    if model is None:
        return value
    try:
        return TypeAdapter(model).validate_python(value)
    except ValidationError as exc:
        raise StepBinaryFormatError(
            f"Payload does not match {getattr(model, '__name__', model)}: {exc}", exc
        ) from exc
