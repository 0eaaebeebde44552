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
SimulatorClient — drives a simulator child process over its stdin/stdout.

Design notes
------------
* ClientBuilder locates the simulator binary (argument or SIMULATOR_PATH)
  and launches it in interpreter mode:
      <simulator> interpreter --cleanup --log-level error
  stdin and stdout are pipes, stderr is inherited unless redirected.

* Strictly synchronous: every step writes one request line, flushes, then
  blocks until exactly one reply line is read. A lock keeps a single request
  in flight, since replies are matched to requests by order only.

* There is no timeout on the read. A hung simulator hangs the caller.

* run_plan() is fail fast: a transport or format error aborts the remaining
  steps because the channel can no longer be trusted to be aligned. Errors
  the simulator reports for a step are returned as data and do not stop it.

* Use the client as a context manager so the child is shut down on every
  exit path:

      with ClientBuilder().try_build() as client:
          responses = client.run_plan(plan)
"""

import logging
import os
import subprocess
import threading

from simulator_client import protocol
from simulator_client.errors import (
    ClientIOError,
    EndOfStreamError,
    MissingHandleError,
    SimulatorNotFoundError,
    StepTransportError,
)
from simulator_client.plan import Plan, Step
from simulator_client.responses import PlanResponse, PlanResponseTyped

_LOG = logging.getLogger(__name__)

SIMULATOR_PATH_ENV = "SIMULATOR_PATH"
INTERPRETER_ARGS = ("interpreter", "--cleanup", "--log-level", "error")


class ClientBuilder:
    """Locates the simulator binary and starts a SimulatorClient on it."""

    def __init__(self, path: str = None, command_prefix=(), stderr=None):
        """
        path           : simulator binary, defaults to $SIMULATOR_PATH
        command_prefix : arguments placed before the binary (e.g. an interpreter)
        stderr         : passed to subprocess.Popen, None inherits the parent's
        """
        path = path or os.environ.get(SIMULATOR_PATH_ENV)
        if not path or not os.path.exists(path):
            _LOG.error(f"Simulator binary not found at path: {path}")
            _LOG.error("Rebuild the simulator or point SIMULATOR_PATH at the binary.")
            raise SimulatorNotFoundError(f"Simulator binary not found, must rebuild simulator: {path}")
        self.path = os.fspath(path)
        self.command_prefix = tuple(command_prefix)
        self.stderr = stderr

    def command(self) -> list:
        return [*self.command_prefix, self.path, *INTERPRETER_ARGS]

    def try_build(self) -> "SimulatorClient":
        """Launch the simulator. Raises ClientError if it cannot be started."""
        cmd = self.command()
        _LOG.info(f"Starting simulator: {' '.join(cmd)}")
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=self.stderr,
            )
        except OSError as exc:
            raise ClientIOError(f"Cannot start simulator at {self.path}: {exc}") from exc

        if process.stdin is None or process.stdout is None:
            for pipe in (process.stdin, process.stdout):
                if pipe is not None:
                    pipe.close()
            process.kill()
            process.wait()
            raise MissingHandleError()

        _LOG.info(f"Simulator started (pid={process.pid})")
        return SimulatorClient(process.stdin, process.stdout, process=process)


class SimulatorClient:
    """
    Ordered request/reply channel to one simulator process.

    *writer* and *reader* are binary streams; *process* is the child owning
    them, if any, and is shut down by close().
    """

    # how long close() waits for the simulator after closing its stdin
    _EXIT_TIMEOUT_S = 5.0

    def __init__(self, writer, reader, process: subprocess.Popen = None):
        self._writer = writer
        self._reader = reader
        self._process = process
        self._lock = threading.Lock()
        self._closed = False
        self._requests = 0

    def __enter__(self) -> "SimulatorClient":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def run_plan(self, plan: Plan) -> list:
        """Run every step of *plan* in order and return the responses in order."""
        _LOG.info(f"Running plan with {len(plan)} step(s) as '{plan.caller_key}'")
        responses = []
        for index, step in enumerate(plan):
            response = self.run_step(plan.caller_key, step)
            if response.base.error is not None:
                _LOG.warning(f"Step {index} ({step.endpoint.value}.{step.method}) failed: {response.base.error}")
            responses.append(response)
        return responses

    def run_step(self, caller_key: str, step: Step) -> PlanResponse:
        """Send one step and return its untyped response."""
        request = protocol.encode_step(caller_key, step)
        _LOG.debug(f"request {self._requests}: endpoint={step.endpoint.value} method={step.method}")
        line = self._send(request)
        return protocol.decode_response(line)

    def run_step_typed(self, caller_key: str, step: Step, schema, model=None) -> PlanResponseTyped:
        """Send one step and parse its payload with the borsh *schema*."""
        return self.run_step(caller_key, step).into_typed(schema, model)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self):
        """Close the pipes and make sure the simulator process is gone."""
        if self._closed:
            return
        self._closed = True
        try:
            self._writer.close()
        except OSError as exc:
            _LOG.warning(f"Error closing simulator stdin: {exc}")

        if self._process is not None:
            try:
                self._process.wait(timeout=self._EXIT_TIMEOUT_S)
            except subprocess.TimeoutExpired:
                _LOG.warning(f"Simulator did not exit within {self._EXIT_TIMEOUT_S}s, terminating")
                self._process.terminate()
                try:
                    self._process.wait(timeout=self._EXIT_TIMEOUT_S)
                except subprocess.TimeoutExpired:
                    _LOG.warning("Simulator ignored SIGTERM, killing")
                    self._process.kill()
                    self._process.wait()
            _LOG.info(f"Simulator stopped (exit code {self._process.returncode})")

        self._reader.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _send(self, request: bytes) -> bytes:
        with self._lock:
            if self._closed:
                error = ClientIOError("Client is closed")
                raise StepTransportError(error) from error
            # ValueError: I/O operation on a closed pipe
            try:
                self._writer.write(request)
                self._writer.flush()
            except (OSError, ValueError) as exc:
                error = ClientIOError(f"Write error: {exc}")
                error.__cause__ = exc
                raise StepTransportError(error) from error
            try:
                line = self._reader.readline()
            except (OSError, ValueError) as exc:
                error = ClientIOError(f"Read error: {exc}")
                error.__cause__ = exc
                raise StepTransportError(error) from error
            if not line:
                error = EndOfStreamError()
                raise StepTransportError(error) from error
            self._requests += 1
            return line
