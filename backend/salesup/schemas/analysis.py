# backend/salesup/schemas/analysis.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from salesup.core.insights import InsightCategory


class AnalysisRequest(BaseModel):
    focus_area: Optional[InsightCategory] = Field(default=None, description="Only return insights of this category")
    days: int = Field(default=14, ge=1, le=90, description="How many recent entries feed the trend rules")


class InsightOut(BaseModel):
    id: str
    type: str
    category: str
    title: str
    description: str
    action_items: List[str]
    priority: str
    impact: str
    confidence: int


class AnalysisOut(BaseModel):
    overall_score: int
    trend: str
    insights: List[InsightOut]
    recommendations: List[str]
    next_goals: List[str]
    weakest_area: str
    strongest_area: str


class AnalysisResponse(BaseModel):
    analysis: Optional[AnalysisOut] = None
    message: Optional[str] = None
