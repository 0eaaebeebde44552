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
simulator-client — run a JSON plan file against the simulator.

Prints one JSON object per step to stdout:
  { "id": ..., "error": ..., "result": { ..., "response": <base64> } }

Exit codes
----------
  0  every step succeeded
  1  the simulator reported an error for at least one step
  2  the plan could not be loaded or the client failed
"""

import argparse
import json
import logging
import sys

from simulator_client.client import SIMULATOR_PATH_ENV, ClientBuilder
from simulator_client.errors import ClientError, SimulatorNotFoundError, StepError
from simulator_client.plan_file import PlanFileError, load_plan

_LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="simulator-client — run a plan file against the simulator"
    )
    parser.add_argument(
        "plan",
        metavar="PLAN_FILE",
        help="JSON plan file",
    )
    parser.add_argument(
        "--simulator", "-s",
        default=None,
        metavar="PATH",
        help=f"Simulator binary (default: ${SIMULATOR_PATH_ENV})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    try:
        plan = load_plan(args.plan)
    except (OSError, PlanFileError) as exc:
        _LOG.error(f"Cannot load plan: {exc}")
        return 2

    try:
        with ClientBuilder(path=args.simulator).try_build() as client:
            responses = client.run_plan(plan)
    except (SimulatorNotFoundError, ClientError, StepError) as exc:
        _LOG.error(f"Plan run failed: {exc}")
        return 2

    for response in responses:
        print(json.dumps(response.to_wire(), separators=(",", ":")))

    failed = sum(1 for response in responses if not response.ok)
    if failed:
        _LOG.error(f"{failed} of {len(responses)} step(s) reported an error")
        return 1
    _LOG.info(f"{len(responses)} step(s) succeeded")
    return 0


if __name__ == "__main__":
    sys.exit(main())
