# Copyright (C) 2026 Frederik Pasch
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# SPDX-License-Identifier: Apache-2.0

from pydantic import BaseModel, ConfigDict, Field


class Id(BaseModel):
    """Opaque handle of a step, resolved by the simulator to that step's output."""

    model_config = ConfigDict(frozen=True)

    ordinal: int = Field(..., ge=0, description="Zero-based position of the step in its plan.")

    @classmethod
    def from_ordinal(cls, ordinal: int) -> "Id":
        return cls(ordinal=ordinal)

    def step_name(self) -> str:
        """Name the simulator uses for the step's output, e.g. ``step_3``."""
        return f"step_{self.ordinal}"

    def __int__(self) -> int:
        return self.ordinal

    def __index__(self) -> int:
        return self.ordinal
