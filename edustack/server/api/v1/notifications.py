"""
Notification Stream Endpoint.

Server-Sent Events carrying the caller's enrollment, progress, completion
and payment notifications as they happen.
"""

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from edustack.core.logging_config import get_logger
from edustack.server.core.constant import NOTIFICATION_PING_SECONDS
from edustack.server.services.deps import CurrentUser, NotificationHubDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/stream",
    summary="Stream Notifications",
    description=(
        "Subscribe to the caller's notifications as Server-Sent Events. Event names are "
        "enrollment-success, progress-updated, course-completed and payment-succeeded; "
        "the data of each event is a JSON object with the event, its payload and a timestamp."
    ),
    response_description="A text/event-stream response.",
)
async def stream_notifications(user: CurrentUser, hub: NotificationHubDep):
    logger.info(f"User {user.id} subscribed to notifications")
    return EventSourceResponse(hub.stream(user.id), ping=NOTIFICATION_PING_SECONDS)
