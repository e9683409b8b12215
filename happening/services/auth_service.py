"""Authentication service: sign-up and credential checks."""
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from happening.core.errors import InvalidCredentials, SignupRejected
from happening.core.logging import logger
from happening.core.security import hash_password, verify_password
from happening.db.models import User
from happening.db.repositories import get_user_by_email, insert_user
from happening.schemas import SignupForm, validation_messages

EMAIL_TAKEN = "Email is already registered."


class AuthService:
    """
    Service layer for authentication operations.

    Session handling stays in the route layer; this class only decides
    whether a sign-up or login is acceptable and touches the users table.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize AuthService with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def signup(self, email: str, username: str, password: str, confirm_password: str) -> User:
        """
        Register a new user.

        Args:
            email: Email address, must be unused
            username: Display name
            password: Plain password
            confirm_password: Must equal password

        Returns:
            Created user object

        Raises:
            SignupRejected: With every message to show the user
        """
        try:
            form = SignupForm(
                email=email,
                username=username,
                password=password,
                confirm_password=confirm_password,
            )
        except ValidationError as e:
            raise SignupRejected(validation_messages(e))

        if await get_user_by_email(self.session, form.email):
            raise SignupRejected([EMAIL_TAKEN])

        user = await insert_user(self.session, form.email, form.username, hash_password(form.password))
        if user is None:
            # lost a race with a concurrent sign-up for the same email
            raise SignupRejected([EMAIL_TAKEN])

        logger.info(f"User {user.id} signed up")
        return user

    async def login(self, email: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            InvalidCredentials: Unknown email or wrong password; the caller
                cannot tell which
        """
        user = await get_user_by_email(self.session, email)
        if user is None:
            logger.info("Login failed: unknown email")
            raise InvalidCredentials()
        if not verify_password(password, user.password):
            logger.info(f"Login failed: wrong password for user {user.id}")
            raise InvalidCredentials()

        logger.info(f"User {user.id} logged in")
        return user
