"""Project CRUD endpoints. Only PENDING projects can be edited or deleted."""

from typing import List
from fastapi import APIRouter, Depends, Body, Response, status

from ..schemas import ProjectOut, ProjectCreate, ProjectUpdate
from ..services.scheduling_service import SchedulingService, get_scheduling_service

router = APIRouter()


@router.get("", response_model=List[ProjectOut])
def list_projects(service: SchedulingService = Depends(get_scheduling_service)):
    return service.list_projects()


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: int, service: SchedulingService = Depends(get_scheduling_service)):
    return service.get_project(project_id)


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    project_in: ProjectCreate = Body(...),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.create_project(project_in.title, project_in.deadline, project_in.expected_revenue)


@router.put("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: int,
    project_in: ProjectUpdate = Body(...),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.update_project(project_id, project_in.title, project_in.deadline, project_in.expected_revenue)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: int, service: SchedulingService = Depends(get_scheduling_service)):
    service.delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
