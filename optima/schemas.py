from pydantic import BaseModel, StrictInt
from datetime import datetime, date as _date
from decimal import Decimal
from typing import Optional, List, Dict
from .models import ProjectStatus

# ----------------- Project Schemas ---------------------


class ProjectBase(BaseModel):
    title: str
    deadline: StrictInt
    expected_revenue: Decimal


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(ProjectBase):
    pass


class ProjectOut(ProjectBase):
    id: int
    status: ProjectStatus
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# ----------------- Schedule Schemas ---------------------


class ScheduleOut(BaseModel):
    strategy: str
    strategy_name: str
    batch_limit: int
    schedule: Dict[int, ProjectOut]  # day-slot -> project
    total_revenue: Decimal
    projects_scheduled: int
    unscheduled_project_ids: List[int] = []


class ExecutionOut(BaseModel):
    strategy: str
    strategy_name: str
    schedule: Dict[int, ProjectOut]
    realized_revenue: Decimal
    projects_completed: int
    completed_at: datetime


class ExpirySweepOut(BaseModel):
    expired_project_ids: List[int]
    count: int

# ----------------- Strategy Schemas ---------------------


class CurrentStrategyOut(BaseModel):
    current_strategy: str
    name: str


class StrategyOut(BaseModel):
    key: str
    name: str
    description: str
    complexity: str
    is_current: bool = False


class PredictionOut(BaseModel):
    strategy: str
    name: str
    projected_revenue: Decimal
    projects_scheduled: int
    rank: int


class PredictionReportOut(BaseModel):
    predictions: List[PredictionOut]
    best_strategy: str
    current_strategy: str

# ----------------- Stats Schemas ---------------------


class StatsOut(BaseModel):
    weekly_revenue: Decimal
    monthly_revenue: Decimal
    projects_completed_this_month: int
    projects_completed_this_week: int


class AnalyticsPointOut(BaseModel):
    date: _date
    revenue: Decimal
