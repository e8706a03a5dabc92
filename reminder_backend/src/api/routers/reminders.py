from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..repositories import ReminderStore, get_store
from ..scheduler import NotificationScheduler, get_scheduler
from ..schemas import ReminderCreate, ReminderList, ReminderOut

router = APIRouter(
    prefix="/api/v1/reminders",
    tags=["reminders"],
)


def _get_store(store: ReminderStore = Depends(get_store)) -> ReminderStore:
    """
    Dependency wrapper for the store to keep signatures clean.
    """
    return store


def _get_scheduler(scheduler: NotificationScheduler = Depends(get_scheduler)) -> NotificationScheduler:
    return scheduler


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=ReminderOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Reminder",
    description="Create a reminder, persist the list and return the created resource.",
    responses={
        201: {"description": "Reminder created successfully"},
        422: {"description": "Incomplete or invalid reminder"},
        503: {"description": "Reminder file unavailable; the reminder is kept in memory"},
    },
)
def create_reminder(payload: ReminderCreate, store: ReminderStore = Depends(_get_store)) -> ReminderOut:
    """
    Create a new reminder.
    """
    created = store.add(payload)
    store.save()
    return ReminderOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=ReminderList,
    summary="List Reminders",
    description="List all reminders in the order they were created.",
)
def list_reminders(store: ReminderStore = Depends(_get_store)) -> ReminderList:
    """
    Return a snapshot of all reminders. The snapshot goes stale as soon as the
    scheduler runs again.
    """
    items = store.list()
    return ReminderList(items=[ReminderOut(**it) for it in items], total=len(items))


# PUBLIC_INTERFACE
@router.post(
    "/check",
    response_model=List[ReminderOut],
    summary="Check Due Reminders",
    description="Flag reminders whose notify minute is now and return every reminder that is due.",
)
def check_due(
    store: ReminderStore = Depends(_get_store),
    scheduler: NotificationScheduler = Depends(_get_scheduler),
) -> List[ReminderOut]:
    return [ReminderOut(**it) for it in scheduler.check_due(store)]


# PUBLIC_INTERFACE
@router.post(
    "/reload",
    response_model=ReminderList,
    summary="Reload Reminder File",
    description=(
        "Re-read the reminder file after it was fixed by hand. Lifts the write halt "
        "that a corrupt file puts on the store."
    ),
    responses={
        409: {"description": "Unsaved changes would be lost; the reload was refused"},
        503: {"description": "The file still cannot be loaded"},
    },
)
def reload_reminders(store: ReminderStore = Depends(_get_store)) -> ReminderList:
    store.reload()
    items = store.list()
    return ReminderList(items=[ReminderOut(**it) for it in items], total=len(items))


# PUBLIC_INTERFACE
@router.get(
    "/{reminder_id}",
    response_model=ReminderOut,
    summary="Get Reminder",
    description="Get a single reminder by ID.",
    responses={
        200: {"description": "Reminder found"},
        404: {"description": "Reminder not found"},
    },
)
def get_reminder(reminder_id: str, store: ReminderStore = Depends(_get_store)) -> ReminderOut:
    item = store.get(reminder_id)
    if not item:
        raise _not_found()
    return ReminderOut(**item)


# PUBLIC_INTERFACE
@router.delete(
    "/{reminder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Reminder",
    description="Delete a reminder by ID and persist the list.",
    responses={
        204: {"description": "Reminder deleted"},
        404: {"description": "Reminder not found"},
    },
)
def delete_reminder(reminder_id: str, store: ReminderStore = Depends(_get_store)) -> None:
    """
    Delete a reminder. Returns 204 on success, 404 if not found.
    """
    if not store.remove(reminder_id):
        raise _not_found()
    store.save()
    return None


# PUBLIC_INTERFACE
@router.post(
    "/{reminder_id}/deliver",
    response_model=ReminderOut,
    summary="Deliver Reminder",
    description="Show the reminder's notification now and mark it delivered.",
    responses={
        200: {"description": "Reminder delivered"},
        404: {"description": "Reminder not found"},
        409: {"description": "Already delivered, or the notification could not be shown"},
    },
)
def deliver_reminder(
    reminder_id: str,
    store: ReminderStore = Depends(_get_store),
    scheduler: NotificationScheduler = Depends(_get_scheduler),
) -> ReminderOut:
    # One lock hold so a concurrent delete cannot land between lookup and delivery
    with store.exclusive():
        if store.get(reminder_id) is None:
            raise _not_found()
        if not scheduler.deliver(store, reminder_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Reminder not delivered")
        item = store.get(reminder_id)
    return ReminderOut(**item)  # type: ignore[arg-type]
