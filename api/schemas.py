from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LimitsModel(BaseModel):
    max_table_rows: int = 50
    max_compare_groups: int = 5
    score_range_ceiling: float = 11.0
    trainer_bucket_edges: List[float] = Field(default_factory=lambda: [6.0, 7.0, 8.0, 9.0])


class FilterCriteriaModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    college: str = "All"
    semester: str | int = "All"
    curriculum: str = "All"
    score_range: str = "All"
    limits: LimitsModel = Field(default_factory=LimitsModel)


class MetaOptionsResponse(BaseModel):
    colleges: List[str]
    semesters: List[int]
    curricula: List[str]
    score_ranges: List[str]
    files: List[str] = Field(default_factory=list)


class SessionRecordModel(BaseModel):
    subject: str
    college: str
    semester: Optional[int | str] = None
    content_score: Optional[float] = None
    trainer_score: Optional[float] = None
    curriculum: str
    action_items: Optional[str] = None
