from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from happening.auth import get_viewer, require_viewer
from happening.core.errors import EventNotFound, EventRejected, NotEventOwner
from happening.core.flash import flash, flash_all
from happening.core.templating import render_page, templates
from happening.db.session import get_session
from happening.schemas import EVENT_CATEGORIES, EVENT_LOCATIONS, Viewer
from happening.services.attendance_service import AttendanceService
from happening.services.event_service import EventService

router = APIRouter(tags=["events"])


def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)


def get_attendance_service(session: AsyncSession = Depends(get_session)) -> AttendanceService:
    return AttendanceService(session)


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    viewer: Viewer = Depends(get_viewer),
    event_service: EventService = Depends(get_event_service),
):
    all_events = await event_service.list_all_events()
    return render_page(request, "partials/home.html", viewer, "Happening nu", all_events=all_events)


@router.get("/user_events", response_class=HTMLResponse)
async def user_events(
    request: Request,
    viewer: Viewer = Depends(get_viewer),
    event_service: EventService = Depends(get_event_service),
):
    """Events created by the signed-in user. Anonymous visitors see an empty list."""
    events = await event_service.list_my_events(viewer)
    return render_page(
        request,
        "partials/user_events.html",
        viewer,
        "Happening nu",
        user_events=events,
        not_home=True,
    )


@router.get("/new_event", response_class=HTMLResponse)
async def new_event_form(request: Request, viewer: Viewer = Depends(require_viewer)):
    return render_page(
        request,
        "partials/new_event.html",
        viewer,
        "New event",
        event_categories=EVENT_CATEGORIES,
        event_locations=EVENT_LOCATIONS,
    )


@router.post("/new_event")
async def create_event(
    request: Request,
    title: str = Form(default=""),
    url: str = Form(default=""),
    location: str = Form(default=""),
    date: str = Form(default=""),
    category: str = Form(default=""),
    viewer: Viewer = Depends(require_viewer),
    event_service: EventService = Depends(get_event_service),
):
    try:
        await event_service.create_event(
            viewer.user_id,
            title=title,
            url=url,
            location=location,
            date=date,
            category=category,
        )
    except EventRejected as e:
        flash_all(request, e.messages)
        return RedirectResponse(url="/new_event", status_code=303)

    flash(request, "Event created.")
    return RedirectResponse(url="/", status_code=303)


@router.post("/event/{event_id}/delete")
async def delete_event(
    request: Request,
    event_id: int,
    viewer: Viewer = Depends(require_viewer),
    event_service: EventService = Depends(get_event_service),
):
    try:
        await event_service.delete_event(viewer.user_id, event_id)
    except (EventNotFound, NotEventOwner):
        return RedirectResponse(url="/user_events", status_code=303)

    flash(request, "Event deleted.")
    return RedirectResponse(url="/user_events", status_code=303)


@router.post("/api/event/{event_id}/going", response_class=HTMLResponse)
async def toggle_going(
    request: Request,
    event_id: int,
    viewer: Viewer = Depends(get_viewer),
    attendance_service: AttendanceService = Depends(get_attendance_service),
):
    """Toggle the caller's attendance and return the refreshed count fragment."""
    count = await attendance_service.toggle(viewer.user_id, event_id)
    return templates.TemplateResponse(
        request,
        "partials/attendee_count.html",
        {"event_id": event_id, "attendee_count": count},
    )
