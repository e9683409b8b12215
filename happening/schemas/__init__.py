import re
import datetime as dt
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, HttpUrl, TypeAdapter, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

EVENT_LOCATIONS = (
    "Stockholm",
    "Göteborg",
    "Malmö",
    "Uppsala",
    "Västerås",
    "Örebro",
    "Linköping",
    "Helsingborg",
    "Jönköping",
    "Norrköping",
    "Lund",
    "Umeå",
    "Gävle",
    "Borås",
    "Eskilstuna",
    "Södertälje",
    "Karlstad",
    "Täby",
    "Växjö",
    "Halmstad",
)

EVENT_CATEGORIES = (
    "Languages",
    "Sports",
    "Social",
    "Arts and theatre",
    "Xmas",
    "Other",
)

USERNAME_LENGTH = (4, 20)
PASSWORD_LENGTH = (8, 15)
TITLE_LENGTH = (4, 30)

_DATE_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_url_adapter = TypeAdapter(HttpUrl)


def _check_length(value: str, bounds: tuple, error_type: str, label: str) -> str:
    low, high = bounds
    if not low <= len(value) <= high:
        raise PydanticCustomError(
            error_type, f"{label} should be between {low} to {high} characters."
        )
    return value


class SignupForm(BaseModel):
    """Sign-up form; every field is checked on its own and errors aggregate."""

    email: str
    username: str
    password: str
    confirm_password: str

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise PydanticCustomError("invalid_email", "Email not valid.")
        return value

    @field_validator("username")
    @classmethod
    def _username_length(cls, value: str) -> str:
        return _check_length(value, USERNAME_LENGTH, "invalid_username", "Username")

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        return _check_length(value, PASSWORD_LENGTH, "invalid_password", "Password")

    @field_validator("confirm_password")
    @classmethod
    def _passwords_match(cls, value: str, info: ValidationInfo) -> str:
        # password is missing from info.data when it already failed its own rule
        password = info.data.get("password")
        if password is not None and value != password:
            raise PydanticCustomError("password_mismatch", "Passwords not identical.")
        return value


class NewEventForm(BaseModel):
    title: str
    url: str
    location: str
    date: str
    category: str

    @field_validator("title")
    @classmethod
    def _title_length(cls, value: str) -> str:
        return _check_length(value, TITLE_LENGTH, "invalid_title", "Event title")

    @field_validator("url")
    @classmethod
    def _url_shape(cls, value: str) -> str:
        try:
            _url_adapter.validate_python(value)
        except ValidationError:
            raise PydanticCustomError("invalid_url", "URL not valid.")
        return value

    @field_validator("location")
    @classmethod
    def _known_location(cls, value: str) -> str:
        if value not in EVENT_LOCATIONS:
            raise PydanticCustomError("invalid_location", "Location not valid.")
        return value

    @field_validator("date")
    @classmethod
    def _calendar_date(cls, value: str) -> str:
        # Stored as text and sorted lexicographically, so the shape is strict.
        if not _DATE_SHAPE.match(value):
            raise PydanticCustomError("invalid_date", "Date must be a valid date in YYYY-MM-DD format.")
        try:
            dt.date.fromisoformat(value)
        except ValueError:
            raise PydanticCustomError("invalid_date", "Date must be a valid date in YYYY-MM-DD format.")
        return value

    @field_validator("category")
    @classmethod
    def _known_category(cls, value: str) -> str:
        if value not in EVENT_CATEGORIES:
            raise PydanticCustomError("invalid_category", "Category not valid.")
        return value


def validation_messages(exc: ValidationError) -> List[str]:
    """Flatten a ValidationError into the messages shown to the user."""
    return [error["msg"] for error in exc.errors()]


class FlashMessage(BaseModel):
    level: str = "info"
    message: str


class Viewer(BaseModel):
    """Who is looking at the page: the session's user, if any."""

    user_id: Optional[int] = None
    username: Optional[str] = None

    @property
    def is_logged_in(self) -> bool:
        return self.user_id is not None


class EventListing(BaseModel):
    id: int
    title: str
    url: str
    location: str
    date: str
    category: str
    user_id: int
    username: str
    attendee_count: int
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
