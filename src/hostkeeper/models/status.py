"""Auxiliary status check models."""

from enum import Enum

from pydantic import BaseModel, Field


class ControlState(str, Enum):
    """Tri-state of an auxiliary control."""

    INSTALLED = "installed"
    DISABLED = "disabled"
    MISSING = "missing"


class StatusCheckResult(BaseModel):
    """State of one auxiliary control at report time."""

    model_config = {"frozen": True}

    name: str = Field(description="Display name of the control")
    state: ControlState = Field(description="Installed and active, installed but off, or absent")
    detail: str = Field(default="", description="Short status text")
    warning: str | None = Field(default=None, description="Warning to surface in the report")

    @property
    def healthy(self) -> bool:
        return self.state == ControlState.INSTALLED
