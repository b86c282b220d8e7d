"""
Signal schemas - Pydantic models for the host signal endpoint
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PRODUCT_ID = "Q_MATRIX"


class ZoneAction(BaseModel):
    """One zone instruction inside actionValue"""
    zoneId: str = Field(description="Absolute zone coordinates as 'x,y'")
    effect: str
    color: str


class SignalLinkBody(BaseModel):
    url: str
    label: str = ""


class SignalRequest(BaseModel):
    """Body of POST /api/2.0/signals"""
    model_config = ConfigDict(extra="forbid")

    action: Literal["DRAW", "FLASH", "ERROR"]
    actionValue: str = Field(description="JSON-encoded list of ZoneAction")
    pid: str = PRODUCT_ID
    message: str = ""
    name: str
    isMuted: bool = True
    clientName: Optional[str] = Field(None, description="Extension id of the sending applet")
    data: Any = None
    link: Optional[SignalLinkBody] = None
    errors: List[str] = Field(default_factory=list)


class SignalResponse(BaseModel):
    """Relevant part of the host's reply to a POST; other fields are kept"""
    model_config = ConfigDict(extra="allow")

    id: Any = None
