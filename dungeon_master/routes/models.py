"""Pydantic request models for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from dungeon_master.models import Character


class StartBody(BaseModel):
    character: Character
    model: str | None = None
    language: str = "en"


class ActionBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    action: str


class ContinueBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")


class SwitchModelBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    model: str


class SaveBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")


class LoadBody(BaseModel):
    filename: str
