# Copyright (C) 2026 Frederik Pasch
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# SPDX-License-Identifier: Apache-2.0

"""Client for driving the program simulator from Python test code."""

from simulator_client.client import ClientBuilder, SimulatorClient
from simulator_client.errors import (
    ClientError,
    ClientIOError,
    EndOfStreamError,
    MissingHandleError,
    SimulatorNotFoundError,
    StepBinaryFormatError,
    StepError,
    StepFormatError,
    StepTransportError,
)
from simulator_client.ids import Id
from simulator_client.params import (
    Ed25519Key,
    IdParam,
    Key,
    KeyParam,
    Param,
    Secp256r1Key,
    StringParam,
    U64Param,
    to_param,
)
from simulator_client.plan import Endpoint, Plan, Step
from simulator_client.responses import (
    BaseResponse,
    PlanResponse,
    PlanResponseTyped,
    PlanResult,
    PlanResultTyped,
)

__all__ = [
    "BaseResponse",
    "ClientBuilder",
    "ClientError",
    "ClientIOError",
    "Ed25519Key",
    "EndOfStreamError",
    "Endpoint",
    "Id",
    "IdParam",
    "Key",
    "KeyParam",
    "MissingHandleError",
    "Param",
    "Plan",
    "PlanResponse",
    "PlanResponseTyped",
    "PlanResult",
    "PlanResultTyped",
    "Secp256r1Key",
    "SimulatorClient",
    "SimulatorNotFoundError",
    "Step",
    "StepBinaryFormatError",
    "StepError",
    "StepFormatError",
    "StepTransportError",
    "StringParam",
    "U64Param",
    "to_param",
]
