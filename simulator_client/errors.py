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
Error taxonomy of the simulator client.

Transport level (ClientError)
-----------------------------
  ClientIOError       reading/writing the simulator pipes failed
  EndOfStreamError    the simulator closed stdout with a request unanswered
  MissingHandleError  a pipe handle was absent right after launch

Step level (StepError)
----------------------
  StepTransportError     wraps a ClientError (available as .cause)
  StepFormatError        the reply line is not valid JSON / base64 / shape
  StepBinaryFormatError  the payload bytes do not unpack into the requested type

Errors reported by the simulator itself travel as data in
PlanResponse.base.error and are never raised.
"""


class ClientError(Exception):
    """Base class for failures of the simulator pipe channel."""


class ClientIOError(ClientError):
    """Raised when reading from or writing to the simulator process fails."""


class EndOfStreamError(ClientError):
    """Raised when the simulator output ends before a reply was read."""

    def __init__(self, message: str = "EOF"):
        super().__init__(message)


class MissingHandleError(ClientError):
    """Raised when the simulator process has no stdin or stdout pipe."""

    def __init__(self, message: str = "Missing handle"):
        super().__init__(message)


class SimulatorNotFoundError(FileNotFoundError):
    """Raised when the simulator binary cannot be located. Always fatal."""


class StepError(Exception):
    """Base class for failures while running a single plan step."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class StepTransportError(StepError):
    """A step failed because the channel to the simulator failed."""

    def __init__(self, cause: ClientError):
        super().__init__(f"Client error {cause}", cause)


class StepFormatError(StepError):
    """A request could not be serialized or a reply could not be parsed."""


class StepBinaryFormatError(StepError):
    """A well-formed reply payload does not decode into the requested type."""
