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
Line-based text protocol spoken with the simulator in interpreter mode.

Request (one line on the simulator's stdin):
  run --step '<compact JSON>'\n

  JSON: { "callerKey": str, "endpoint": "key" | "readonly" | "execute",
          "method": str, "maxUnits": u64,
          "params": [ { "type": <tag>, "value": <base64> }, ... ] }

Response (one line on the simulator's stdout):
  see simulator_client.responses

There is no request id on the wire: the n-th reply line answers the n-th
request line.
"""

import json

from pydantic import ValidationError

from simulator_client.errors import StepFormatError
from simulator_client.plan import Step
from simulator_client.responses import PlanResponse

RUN_STEP_PREFIX = b"run --step '"
RUN_STEP_SUFFIX = b"'\n"


def encode_step(caller_key: str, step: Step) -> bytes:
    """Encode a step request to a single framed line."""
    try:
        payload = json.dumps(step.to_wire(caller_key), separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        # UnicodeEncodeError: lone surrogates in method or caller key
        raise StepFormatError(f"Serialization error: {exc}", exc) from exc
    return RUN_STEP_PREFIX + payload + RUN_STEP_SUFFIX


def decode_response(line) -> PlanResponse:
    """Decode one reply line (bytes or str, trailing newline allowed)."""
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StepFormatError(f"Deserialization error: {exc}", exc) from exc
    try:
        return PlanResponse.model_validate_json(line.strip())
    except ValidationError as exc:
        raise StepFormatError(f"Deserialization error: {exc}", exc) from exc
