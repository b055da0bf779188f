"""SQLAlchemy-backed user storage."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coral_auth.exceptions import EmailAlreadyRegisteredError
from coral_auth.models.schemas import ExternalProfile
from coral_auth.models.user import User, UserProfile
from coral_auth.users.passwords import dummy_verify, hash_password, verify_password
from coral_auth.utils.logging import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """User lookups and creation for one database session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_by_id(self, user_id: str) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def find_local_user(self, email: str, password: str) -> User | None:
        """Find the user matching a local email/password pair.

        Users without a local password (OAuth-only accounts) never match. A
        miss still costs one bcrypt verification so response times do not
        reveal which emails are registered.
        """
        user = await self.find_by_email(email)
        if not user or not user.password_hash:
            dummy_verify()
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def create_local_user(
        self, email: str, password: str, username: str | None = None
    ) -> User:
        """Create a user with local credentials.

        Raises:
            EmailAlreadyRegisteredError: If the email is already in use
        """
        email = normalize_email(email)
        if await self.find_by_email(email):
            raise EmailAlreadyRegisteredError(email)

        user = User(
            email=email,
            username=await self._unique_username(username or email.split("@")[0]),
            password_hash=hash_password(password),
            profiles=[],
        )
        self.db.add(user)
        await self.db.flush()
        logger.info(f"Created local user {user.id}")
        return user

    async def find_or_create_external_user(self, profile: ExternalProfile) -> User:
        """Return the user linked to an external profile.

        On first login the profile is linked to an existing user with the same
        email when the provider verified it, or a new user is created. Logging in again with the same
        provider id always returns the same user.
        """
        user = await self._find_by_profile(profile.provider, profile.id)
        if user:
            if profile.avatar_url:
                user.avatar_url = profile.avatar_url
            return user

        try:
            user = await self._link_or_create(profile)
        except IntegrityError:
            # A concurrent first login inserted the same profile
            await self.db.rollback()
            user = await self._find_by_profile(profile.provider, profile.id)
            if user is None:
                raise
        return user

    async def _find_by_profile(self, provider: str, external_id: str) -> User | None:
        result = await self.db.execute(
            select(User)
            .join(UserProfile, UserProfile.user_id == User.id)
            .where(
                UserProfile.provider == provider,
                UserProfile.external_id == external_id,
            )
        )
        return result.scalar_one_or_none()

    async def _link_or_create(self, profile: ExternalProfile) -> User:
        # Unverified addresses are never trusted to identify an account
        email = None
        if profile.email and profile.email_verified:
            email = normalize_email(profile.email)
        user = await self.find_by_email(email) if email else None

        if user:
            logger.info(f"Linking {profile.provider} profile to existing user {user.id}")
        else:
            user = User(
                username=await self._unique_username(profile.preferred_username()),
                email=email,
                avatar_url=profile.avatar_url,
                profiles=[],
            )
            self.db.add(user)
            logger.info(f"Creating user from {profile.provider} profile")

        self.db.add(
            UserProfile(user=user, provider=profile.provider, external_id=profile.id)
        )
        await self.db.flush()
        return user

    async def _unique_username(self, base_username: str) -> str:
        username = base_username or "user"
        counter = 1
        while True:
            result = await self.db.execute(select(User.id).where(User.username == username))
            if not result.scalar_one_or_none():
                return username
            username = f"{base_username}_{counter}"
            counter += 1
