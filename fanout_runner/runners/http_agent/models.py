"""Pydantic models for target agent API responses."""

from typing import Literal

from pydantic import BaseModel

from fanout_runner.models.document import OutcomeDocument

type RunStatus = Literal["queued", "running", "completed"]


class DispatchResponse(BaseModel):
    """Response from the create run API."""

    run_id: str


class RunResponse(BaseModel):
    """Response from the get run API."""

    run_id: str
    status: RunStatus
    outcome: OutcomeDocument | None = None
