from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class DashboardFiltersModel(BaseModel):
    centres_involved: str = "All"
    type_of_innovation: str = "All"
    scale: str = "All"
    climate_classification: str = "All"
    country: str = "All"


class SummaryRequest(DashboardFiltersModel):
    session_id: str = "default"


class FacetModel(BaseModel):
    label: str
    field: str
    multi_valued: bool
    options: List[str]


class MetaFacetsResponse(BaseModel):
    facets: List[FacetModel]


class ChatTurnModel(BaseModel):
    role: Literal["user", "model"] = "user"
    text: str = ""


class ChatRequest(BaseModel):
    history: List[ChatTurnModel] = Field(default_factory=list)
    message: str


class ChatResponse(BaseModel):
    reply: str


class SummaryResponse(BaseModel):
    summary: Optional[str] = None
    superseded: bool = False
    generation: int
