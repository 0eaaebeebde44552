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
Step parameters and their wire encoding.

Every parameter is sent as ``{"type": <tag>, "value": <base64>}``:

  U64Param        "u64"        little-endian 8-byte unsigned integer
  StringParam     "string"     raw UTF-8 bytes
  IdParam         "id"         UTF-8 bytes of "step_<ordinal>"
  KeyParam        "ed25519" |  UTF-8 bytes of the key name
                  "secp256r1"

Tags and byte layouts are part of the simulator contract, so each variant
encodes itself explicitly. There is no decode path: only the simulator reads
these values.
"""

import base64
import struct
from typing import ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field

from simulator_client.ids import Id

U64_MAX = 2**64 - 1


def _wire(tag: str, raw: bytes) -> dict:
    return {"type": tag, "value": base64.b64encode(raw).decode("ascii")}


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class _Key(BaseModel):
    model_config = ConfigDict(frozen=True)

    algorithm: ClassVar[str]

    name: str = Field(..., description="Raw key name, as known to the simulator.")

    def encode(self) -> dict:
        return _wire(self.algorithm, self.name.encode("utf-8"))


class Ed25519Key(_Key):
    algorithm: ClassVar[str] = "ed25519"


class Secp256r1Key(_Key):
    algorithm: ClassVar[str] = "secp256r1"


Key = Union[Ed25519Key, Secp256r1Key]


# ---------------------------------------------------------------------------
# Params
# ---------------------------------------------------------------------------


class U64Param(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    value: int = Field(..., ge=0, le=U64_MAX)

    def encode(self) -> dict:
        return _wire("u64", struct.pack("<Q", self.value))


class StringParam(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    value: str

    def encode(self) -> dict:
        return _wire("string", self.value.encode("utf-8"))


class IdParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Id

    def encode(self) -> dict:
        return _wire("id", self.id.step_name().encode("utf-8"))


class KeyParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: Key

    def encode(self) -> dict:
        return self.key.encode()


Param = Union[U64Param, StringParam, IdParam, KeyParam]

_PARAM_TYPES = (U64Param, StringParam, IdParam, KeyParam)


def to_param(value) -> Param:
    """Wrap a plain value into the matching Param variant.

    ``int`` becomes u64, ``str`` becomes string, an :class:`Id` becomes an id
    reference and a key becomes a key param. Params pass through unchanged.
    """
    if isinstance(value, _PARAM_TYPES):
        return value
    # bool is an int subclass but has no u64 meaning on the wire
    if isinstance(value, bool):
        raise TypeError("bool is not a valid step parameter")
    if isinstance(value, int):
        return U64Param(value=value)
    if isinstance(value, str):
        return StringParam(value=value)
    if isinstance(value, Id):
        return IdParam(id=value)
    if isinstance(value, (Ed25519Key, Secp256r1Key)):
        return KeyParam(key=value)
    raise TypeError(f"Cannot convert {type(value).__name__} to a step parameter")
