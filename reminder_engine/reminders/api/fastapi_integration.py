"""
FastAPI integration for the reminder service.
Exposes settings updates, removal, status and the manual trigger over HTTP.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from reminder_engine.errors import ConfigError, StoreError, UserNotFoundError
from reminder_engine.reminders.infrastructure.service import ReminderService


class ReminderSettingsPayload(BaseModel):
    """Request body of a reminder settings update."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = False
    time: str = "20:00"
    timezone: str = "UTC"
    streak_protection: bool = Field(default=True, alias="streakProtection")


class ScheduleResponse(BaseModel):
    """Response after a settings update."""

    scheduled: bool
    next_fire_at: datetime | None = None


class ReminderStatusResponse(BaseModel):
    """Current registry state for one user."""

    scheduled: bool
    job: dict[str, Any] | None = None


class ReminderRouter:
    """
    FastAPI router for a ReminderService.

    Example usage:
        ```python
        from fastapi import FastAPI

        app = FastAPI()
        service = ReminderService(store, oracle, dispatcher)

        reminder_router = ReminderRouter(service, prefix="/reminders")
        app.include_router(reminder_router.router)

        # PUT /reminders/{user_id} with {"enabled": true, "time": "21:00", ...}
        ```
    """

    def __init__(
        self,
        service: ReminderService,
        prefix: str = "",
        tags: Sequence[str] | None = None,
    ):
        """
        Initialize the router.

        Args:
            service: The reminder service to expose.
            prefix: URL prefix for the routes (e.g., "/reminders").
            tags: OpenAPI tags for documentation.
        """
        if tags is None:
            tags = ["Reminders"]

        self.service = service
        self.router = APIRouter(prefix=prefix, tags=list(tags))
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Setup the API routes."""

        @self.router.put(
            "/{user_id}",
            response_model=ScheduleResponse,
            summary="Update reminder settings",
            description="Install, replace or disable a user's daily reminder.",
        )
        async def update_settings(
            user_id: str, payload: ReminderSettingsPayload
        ) -> ScheduleResponse:
            """
            Apply a settings update.

            Raises:
                HTTPException: 422 if the time or timezone is invalid.
            """
            try:
                job = self.service.schedule_user_reminder(
                    user_id, payload.model_dump(by_alias=True)
                )
            except ConfigError as e:
                raise HTTPException(
                    status_code=422,
                    detail={"field": e.field, "message": str(e)},
                ) from e

            if job is None:
                return ScheduleResponse(scheduled=False)
            return ScheduleResponse(scheduled=True, next_fire_at=job.next_fire_at)

        @self.router.delete(
            "/{user_id}",
            response_model=dict[str, bool],
            summary="Remove a reminder",
        )
        async def remove_reminder(user_id: str) -> dict[str, bool]:
            return {"removed": self.service.remove_user_reminder(user_id)}

        @self.router.get(
            "/{user_id}",
            response_model=ReminderStatusResponse,
            summary="Get reminder status",
        )
        async def get_status(user_id: str) -> ReminderStatusResponse:
            job = self.service.get_job(user_id)
            if job is None:
                return ReminderStatusResponse(scheduled=False)
            return ReminderStatusResponse(scheduled=True, job=job.to_dict())

        @self.router.post(
            "/{user_id}/trigger",
            response_model=dict[str, Any],
            summary="Trigger a reminder now",
            description="Run the reminder decision for a user immediately.",
        )
        async def trigger_now(user_id: str) -> dict[str, Any]:
            """
            Raises:
                HTTPException: 404 if the user does not exist, 422 if the
                    stored policy is malformed, 503 if the store is unavailable.
            """
            try:
                event = await self.service.trigger_now(user_id)
            except UserNotFoundError as e:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
            except ConfigError as e:
                raise HTTPException(
                    status_code=422,
                    detail={"field": e.field, "message": str(e)},
                ) from e
            except StoreError as e:
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)
                ) from e
            return event.to_dict()


def create_reminder_router(
    service: ReminderService,
    prefix: str = "",
    tags: Sequence[str] | None = None,
) -> APIRouter:
    """
    Convenience function to create a FastAPI router for a ReminderService.

    Args:
        service: The reminder service.
        prefix: URL prefix for the routes.
        tags: OpenAPI tags.

    Returns:
        Configured APIRouter instance.
    """
    return ReminderRouter(service, prefix, tags).router
