"""
Schedule endpoints: preview, strategy selection, predictions, execution and stats.
"""

from typing import List
from fastapi import APIRouter, Depends, Query

from ..schemas import (
    ProjectOut,
    ScheduleOut,
    ExecutionOut,
    ExpirySweepOut,
    CurrentStrategyOut,
    StrategyOut,
    PredictionOut,
    PredictionReportOut,
    StatsOut,
    AnalyticsPointOut,
)
from ..services.scheduling_service import SchedulingService, ComputedSchedule, get_scheduling_service

router = APIRouter()


def _schedule_out(computed: ComputedSchedule) -> ScheduleOut:
    result = computed.result
    return ScheduleOut(
        strategy=computed.strategy.key,
        strategy_name=computed.strategy.name,
        batch_limit=computed.batch_limit,
        schedule={slot: ProjectOut.model_validate(project) for slot, project in result.slots.items()},
        total_revenue=result.total_revenue,
        projects_scheduled=result.projects_scheduled,
        unscheduled_project_ids=list(result.unscheduled),
    )


def _current_strategy_out(service: SchedulingService) -> CurrentStrategyOut:
    strategy = service.current_strategy()
    return CurrentStrategyOut(current_strategy=strategy.key, name=strategy.name)


@router.get("/current", response_model=ScheduleOut)
def get_current_schedule(service: SchedulingService = Depends(get_scheduling_service)):
    """Schedule the current strategy would commit right now. Nothing is changed."""
    return _schedule_out(service.current_schedule())


@router.post("/generate", response_model=ScheduleOut)
def generate_schedule(service: SchedulingService = Depends(get_scheduling_service)):
    return _schedule_out(service.current_schedule())


@router.get("/strategy", response_model=CurrentStrategyOut)
def get_strategy(service: SchedulingService = Depends(get_scheduling_service)):
    return _current_strategy_out(service)


@router.post("/strategy", response_model=CurrentStrategyOut)
def set_strategy(
    type: str = Query(..., description="Strategy key: greedy, edf, priority or fcfs"),
    service: SchedulingService = Depends(get_scheduling_service),
):
    service.set_strategy(type)
    return _current_strategy_out(service)


@router.get("/strategies", response_model=List[StrategyOut])
def list_strategies(service: SchedulingService = Depends(get_scheduling_service)):
    current_key = service.current_strategy().key
    return [
        StrategyOut(
            key=strategy.key,
            name=strategy.name,
            description=strategy.description,
            complexity=strategy.complexity,
            is_current=strategy.key == current_key,
        )
        for strategy in service.list_strategies()
    ]


@router.get("/predictions", response_model=PredictionReportOut)
def get_predictions(service: SchedulingService = Depends(get_scheduling_service)):
    report = service.predictions()
    return PredictionReportOut(
        predictions=[
            PredictionOut(
                strategy=p.key,
                name=p.name,
                projected_revenue=p.projected_revenue,
                projects_scheduled=p.projects_scheduled,
                rank=p.rank,
            )
            for p in report.predictions
        ],
        best_strategy=report.best_strategy_key,
        current_strategy=service.current_strategy().key,
    )


@router.post("/execute", response_model=ExecutionOut)
def execute_schedule(service: SchedulingService = Depends(get_scheduling_service)):
    """Recompute the current schedule and mark every scheduled project COMPLETED."""
    execution = service.execute()
    result = execution.result
    return ExecutionOut(
        strategy=execution.strategy.key,
        strategy_name=execution.strategy.name,
        schedule={slot: ProjectOut.model_validate(project) for slot, project in result.slots.items()},
        realized_revenue=result.total_revenue,
        projects_completed=result.projects_scheduled,
        completed_at=execution.completed_at,
    )


@router.post("/expire", response_model=ExpirySweepOut)
def expire_overdue_projects(service: SchedulingService = Depends(get_scheduling_service)):
    expired = service.sweep_expired()
    return ExpirySweepOut(expired_project_ids=expired, count=len(expired))


@router.get("/stats", response_model=StatsOut)
def get_stats(service: SchedulingService = Depends(get_scheduling_service)):
    stats = service.stats()
    return StatsOut(
        weekly_revenue=stats.weekly_revenue,
        monthly_revenue=stats.monthly_revenue,
        projects_completed_this_month=stats.projects_completed_this_month,
        projects_completed_this_week=stats.projects_completed_this_week,
    )


@router.get("/analytics", response_model=List[AnalyticsPointOut])
def get_analytics(service: SchedulingService = Depends(get_scheduling_service)):
    return [AnalyticsPointOut(date=point.day, revenue=point.revenue) for point in service.analytics()]
