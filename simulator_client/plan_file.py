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
Plans written as JSON files.

File format (plain values, not base64):
  {
    "callerKey": "alice",
    "steps": [
      {"endpoint": "key", "method": "create_key",
       "params": [{"type": "ed25519", "value": "alice"}]},
      {"endpoint": "execute", "method": "program_create",
       "params": [{"type": "string", "value": "./token.wasm"}]},
      {"endpoint": "execute", "method": "init", "maxUnits": 100000,
       "params": [{"type": "id", "value": 1}, {"type": "u64", "value": 42}]}
    ]
  }

"id" values are ordinals of earlier steps in the same file.
"""

import json

from pydantic import ValidationError

from simulator_client.ids import Id
from simulator_client.params import (
    Ed25519Key,
    IdParam,
    KeyParam,
    Secp256r1Key,
    StringParam,
    U64Param,
)
from simulator_client.plan import Plan, Step


class PlanFileError(ValueError):
    """Raised when a plan file cannot be turned into a Plan."""


def _id_param(value, index):
    if not isinstance(value, int) or isinstance(value, bool):
        raise PlanFileError(f"step {index}: id param must be a step ordinal, got {value!r}")
    if value >= index:
        raise PlanFileError(f"step {index}: id param refers to step {value}, which is not an earlier step")
    return IdParam(id=Id.from_ordinal(value))


_PARAM_BUILDERS = {
    "u64": lambda value, _index: U64Param(value=value),
    "string": lambda value, _index: StringParam(value=value),
    "id": _id_param,
    "ed25519": lambda value, _index: KeyParam(key=Ed25519Key(name=value)),
    "secp256r1": lambda value, _index: KeyParam(key=Secp256r1Key(name=value)),
}


def _param(data, index):
    if not isinstance(data, dict) or "type" not in data or "value" not in data:
        raise PlanFileError(f"step {index}: param must be an object with 'type' and 'value': {data!r}")
    if not isinstance(data["type"], str):
        raise PlanFileError(f"step {index}: param type must be a string, got {data['type']!r}")
    builder = _PARAM_BUILDERS.get(data["type"])
    if builder is None:
        raise PlanFileError(f"step {index}: unknown param type '{data['type']}'")
    return builder(data["value"], index)


def plan_from_dict(data: dict) -> Plan:
    """Build a Plan from the decoded JSON document."""
    if not isinstance(data, dict):
        raise PlanFileError("plan must be a JSON object")
    caller_key = data.get("callerKey")
    if not isinstance(caller_key, str) or not caller_key:
        raise PlanFileError("plan requires a non-empty 'callerKey'")
    steps = data.get("steps")
    if not isinstance(steps, list):
        raise PlanFileError("plan requires a 'steps' list")

    plan = Plan(caller_key)
    for index, raw in enumerate(steps):
        if not isinstance(raw, dict):
            raise PlanFileError(f"step {index}: must be an object")
        params = raw.get("params", [])
        if not isinstance(params, list):
            raise PlanFileError(f"step {index}: 'params' must be a list")
        try:
            step = Step(
                endpoint=raw.get("endpoint"),
                method=raw.get("method"),
                max_units=raw.get("maxUnits", 0),
                params=[_param(p, index) for p in params],
            )
        except ValidationError as exc:
            raise PlanFileError(f"step {index}: {exc}") from exc
        plan.add_step(step)
    return plan


def load_plan(path) -> Plan:
    """Read a JSON plan file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except UnicodeDecodeError as exc:
        raise PlanFileError(f"{path}: not UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise PlanFileError(f"{path}: invalid JSON: {exc}") from exc
    return plan_from_dict(data)
