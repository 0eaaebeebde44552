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
Plans and steps.

A Plan is an ordered, append-only list of Steps run on behalf of one caller
key. Plan order is send order and reply order, so a step's position is also
the identity other steps use to refer to its output (see Plan.add_step).
"""

import os
from enum import Enum
from typing import Iterator, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from simulator_client.ids import Id
from simulator_client.params import Key, KeyParam, Param, U64_MAX, to_param


class Endpoint(str, Enum):
    """Simulator subsystem a step is sent to."""

    KEY = "key"
    READONLY = "readonly"
    EXECUTE = "execute"


class Step(BaseModel):
    """A single call to the simulator API."""

    model_config = ConfigDict(frozen=True)

    endpoint: Endpoint
    method: str
    max_units: int = Field(0, ge=0, le=U64_MAX, description="Unit cap for the step, 0 = simulator default.")
    params: Tuple[Param, ...] = ()

    @field_validator("params", mode="before")
    @classmethod
    def _convert_params(cls, value):
        return tuple(to_param(v) for v in value)

    @classmethod
    def create_key(cls, key: Key) -> "Step":
        """Step that creates a named key in the simulator."""
        return cls(endpoint=Endpoint.KEY, method="create_key", params=[KeyParam(key=key)])

    @classmethod
    def create_program(cls, path) -> "Step":
        """Step that deploys the program found at *path*."""
        return cls(endpoint=Endpoint.EXECUTE, method="program_create", params=[os.fspath(path)])

    def to_wire(self, caller_key: str) -> dict:
        """Request object as sent on the wire, field names in camelCase."""
        return {
            "callerKey": caller_key,
            "endpoint": self.endpoint.value,
            "method": self.method,
            "maxUnits": self.max_units,
            "params": [param.encode() for param in self.params],
        }


class Plan:
    """Ordered steps sharing one caller key."""

    def __init__(self, caller_key: str):
        self._caller_key = caller_key
        self._steps: list = []

    @property
    def caller_key(self) -> str:
        return self._caller_key

    @property
    def steps(self) -> Tuple[Step, ...]:
        return tuple(self._steps)

    def add_step(self, step: Step) -> Id:
        """Append *step* and return the Id that refers to it in later steps.

        Ids may only be used by steps added after the one they refer to.
        """
        self._steps.append(step)
        return Id.from_ordinal(len(self._steps) - 1)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(tuple(self._steps))

    def __repr__(self) -> str:
        return f"Plan(caller_key={self._caller_key!r}, steps={len(self._steps)})"
