"""Endpoints and websocket handler for owner notifications."""

from __future__ import annotations

import logging
from typing import Any, NoReturn

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    DispatchResult,
    count_unread as count_unread_uc,
    create_notification as create_notification_uc,
    delete_notification as delete_notification_uc,
    get_notification as get_notification_uc,
    list_notifications as list_notifications_uc,
    mark_all_as_read as mark_all_as_read_uc,
    mark_as_read as mark_as_read_uc,
)
from app.application.use_cases.preferences import (
    load_preferences as load_preferences_uc,
    update_preferences as update_preferences_uc,
)
from app.domain.entities import Notification
from app.domain.exceptions import (
    NotificationError,
    NotificationNotFoundError,
    PersistenceError,
    ValidationError,
)
from app.infrastructure.database import SessionLocal, get_db
from app.infrastructure.notifications import notification_manager, serialize_notification
from app.infrastructure.repositories import NotificationRepository
from app.interfaces.api.dependencies import get_current_owner, resolve_owner
from app.interfaces.api.schemas import (
    DispatchRead,
    MarkAllReadResponse,
    NotificationCreate,
    NotificationRead,
    PreferencesRead,
    PreferencesUpdate,
    UnreadCountRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _raise_http(exc: NotificationError) -> NoReturn:
    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if isinstance(exc, NotificationNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, PersistenceError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification store unavailable",
        ) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


def _dispatch_to_schema(result: DispatchResult) -> DispatchRead:
    return DispatchRead(
        notification=_notification_to_schema(result.notification),
        channels={channel: outcome.value for channel, outcome in result.channels.items()},
        channel_errors=[str(error) for error in result.channel_errors],
    )


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
) -> list[NotificationRead]:
    """Return the owner's notifications, newest first."""

    try:
        notifications = list_notifications_uc(
            db, owner, limit=limit, offset=offset, unread_only=unread_only
        )
    except NotificationError as exc:
        _raise_http(exc)
    return [_notification_to_schema(notification) for notification in notifications]


@router.post("/", response_model=DispatchRead, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
) -> DispatchRead:
    """Persist a notification and report the outcome of every channel."""

    try:
        result = create_notification_uc(
            db,
            owner=payload.owner,
            title=payload.title,
            message=payload.message,
            type=payload.type,
            category=payload.category,
            action_url=payload.action_url,
            metadata=payload.metadata,
            expires_at=payload.expires_at,
            send_email=payload.send_email,
        )
    except NotificationError as exc:
        _raise_http(exc)
    return _dispatch_to_schema(result)


@router.get("/unread-count", response_model=UnreadCountRead)
def unread_count(
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
) -> UnreadCountRead:
    try:
        return UnreadCountRead(count=count_unread_uc(db, owner))
    except NotificationError as exc:
        _raise_http(exc)


@router.post("/read-all", response_model=MarkAllReadResponse)
def mark_all_as_read(
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
) -> MarkAllReadResponse:
    try:
        return MarkAllReadResponse(updated=mark_all_as_read_uc(db, owner))
    except NotificationError as exc:
        _raise_http(exc)


@router.get("/preferences", response_model=PreferencesRead)
def get_preferences(
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
) -> PreferencesRead:
    """Return stored preferences merged over the defaults."""

    return PreferencesRead.model_validate(load_preferences_uc(db, owner))


@router.put("/preferences", response_model=PreferencesRead)
def update_preferences(
    payload: PreferencesUpdate,
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
) -> PreferencesRead:
    """Apply a partial preference update."""

    try:
        preferences = update_preferences_uc(db, owner, payload.model_dump(exclude_unset=True))
    except NotificationError as exc:
        _raise_http(exc)
    return PreferencesRead.model_validate(preferences)


@router.get("/{notification_id}", response_model=NotificationRead)
def get_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
) -> NotificationRead:
    try:
        return _notification_to_schema(get_notification_uc(db, owner, notification_id))
    except NotificationError as exc:
        _raise_http(exc)


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
) -> NotificationRead:
    """Flag a notification as read; repeating the call is harmless."""

    try:
        return _notification_to_schema(mark_as_read_uc(db, owner, notification_id))
    except NotificationError as exc:
        _raise_http(exc)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
) -> Response:
    try:
        delete_notification_uc(db, owner, notification_id)
    except NotificationError as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _acknowledge(owner: str, ids: list[Any]) -> None:
    notification_ids = [value for value in ids if isinstance(value, int)]
    if not notification_ids:
        return
    session = SessionLocal()
    try:
        NotificationRepository(session).mark_as_read(notification_ids, owner=owner)
    finally:
        session.close()


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Stream the owner's new notifications over a websocket."""

    try:
        owner = resolve_owner(websocket.query_params.get("owner"))
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    session = SessionLocal()
    try:
        pending = list_notifications_uc(session, owner, unread_only=True)
    except PersistenceError:
        logger.warning("Unable to load pending notifications of %s", owner)
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return
    finally:
        session.close()

    await notification_manager.connect(owner, websocket)
    try:
        await websocket.send_json(
            {"type": "init", "data": [serialize_notification(item) for item in pending]}
        )
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
            elif message_type == "ack":
                ids = message.get("ids")
                if isinstance(ids, list):
                    try:
                        _acknowledge(owner, ids)
                    except PersistenceError:
                        logger.warning("Could not acknowledge notifications of %s", owner)
    except WebSocketDisconnect:
        logger.debug("Notification websocket of %s closed", owner)
    finally:
        notification_manager.disconnect(owner, websocket)
