"""
Schedule routes for the schedule builder API.

Every mutating route runs the engine synchronously and then schedules a
debounced save; ``POST /save`` writes immediately.
"""

import uuid
from fastapi import APIRouter, Depends, Request, status

from schedule_builder.schemas import (
    AutoCalculateRead,
    GenerateRequest,
    MilestoneCreate,
    MilestoneRead,
    MilestoneUpdate,
    ProjectSchedule,
    ScheduleItemRead,
    ScheduleItemUpdate,
    WindowUpdate,
)
from schedule_builder.services.host import ScheduleHost
from schedule_builder.services.items import LineItem
from schedule_builder.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


def get_host(request: Request) -> ScheduleHost:
    """Dependency for the application's schedule host."""
    return request.app.state.host


@router.get("", response_model=ProjectSchedule)
async def get_schedule(
    project_id: uuid.UUID,
    host: ScheduleHost = Depends(get_host),
) -> ProjectSchedule:
    """Get the current schedule with freshly computed summary fields."""
    engine = await host.get_engine(project_id)
    return engine.snapshot()


@router.post("/generate", response_model=ProjectSchedule)
async def generate_schedule(
    project_id: uuid.UUID,
    request_in: GenerateRequest,
    host: ScheduleHost = Depends(get_host),
) -> ProjectSchedule:
    """
    Regenerate the schedule from estimate line items.

    Discards every existing item and manual edit; callers confirm first.
    """
    engine = await host.get_engine(project_id)
    line_items = [LineItem(**line.model_dump()) for line in request_in.line_items]
    engine.generate(line_items, request_in.start_date)
    await host.touch(project_id)
    return engine.snapshot()


@router.patch("/items/{item_id}", response_model=ScheduleItemRead)
async def update_item(
    project_id: uuid.UUID,
    item_id: str,
    item_in: ScheduleItemUpdate,
    host: ScheduleHost = Depends(get_host),
) -> ScheduleItemRead:
    """
    Update a schedule item.

    Changing start_date or duration moves every dependent item.
    """
    engine = await host.get_engine(project_id)
    update_data = item_in.model_dump(exclude_unset=True)

    logger.info(f"Updating item {item_id} in project={project_id}: {update_data}")

    item = engine.update_item(item_id, update_data)
    await host.touch(project_id)
    return ScheduleItemRead.model_validate(item)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    project_id: uuid.UUID,
    item_id: str,
    host: ScheduleHost = Depends(get_host),
) -> None:
    """Delete a schedule item; its dependents become unanchored."""
    engine = await host.get_engine(project_id)
    engine.remove_item(item_id)
    await host.touch(project_id)


@router.post("/auto-calculate", response_model=AutoCalculateRead)
async def auto_calculate(
    project_id: uuid.UUID,
    host: ScheduleHost = Depends(get_host),
) -> AutoCalculateRead:
    """
    Start every dependent item the day after its predecessor ends.

    Single pass in item order; overwrites manually set start dates.
    """
    engine = await host.get_engine(project_id)
    result = engine.auto_calculate_from_predecessors()
    await host.touch(project_id)
    return AutoCalculateRead(
        schedule=engine.snapshot(),
        updated_ids=result.updated_ids,
        dangling=result.dangling,
    )


@router.patch("/window", response_model=ProjectSchedule)
async def update_window(
    project_id: uuid.UUID,
    window_in: WindowUpdate,
    host: ScheduleHost = Depends(get_host),
) -> ProjectSchedule:
    """Move the schedule's start/end window. Items are not moved."""
    engine = await host.get_engine(project_id)
    engine.set_window(window_in.start_date, window_in.end_date)
    await host.touch(project_id)
    return engine.snapshot()


@router.post("/milestones", response_model=MilestoneRead, status_code=status.HTTP_201_CREATED)
async def create_milestone(
    project_id: uuid.UUID,
    milestone_in: MilestoneCreate,
    host: ScheduleHost = Depends(get_host),
) -> MilestoneRead:
    """Add a milestone to the schedule."""
    engine = await host.get_engine(project_id)
    milestone = engine.add_milestone(**milestone_in.model_dump())
    await host.touch(project_id)
    return MilestoneRead.model_validate(milestone)


@router.patch("/milestones/{milestone_id}", response_model=MilestoneRead)
async def update_milestone(
    project_id: uuid.UUID,
    milestone_id: str,
    milestone_in: MilestoneUpdate,
    host: ScheduleHost = Depends(get_host),
) -> MilestoneRead:
    """Update a milestone."""
    engine = await host.get_engine(project_id)
    milestone = engine.update_milestone(milestone_id, milestone_in.model_dump(exclude_unset=True))
    await host.touch(project_id)
    return MilestoneRead.model_validate(milestone)


@router.delete("/milestones/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_milestone(
    project_id: uuid.UUID,
    milestone_id: str,
    host: ScheduleHost = Depends(get_host),
) -> None:
    """Remove a milestone."""
    engine = await host.get_engine(project_id)
    engine.remove_milestone(milestone_id)
    await host.touch(project_id)


@router.post("/save", response_model=ProjectSchedule)
async def save_schedule(
    project_id: uuid.UUID,
    host: ScheduleHost = Depends(get_host),
) -> ProjectSchedule:
    """Persist the schedule now, cancelling any pending auto-save."""
    logger.info(f"Saving schedule for project={project_id}")
    return await host.save_now(project_id)
