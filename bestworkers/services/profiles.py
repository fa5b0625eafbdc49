from datetime import datetime, timezone
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from bestworkers.database import session_scope
from bestworkers.errors import ConflictError, NotFoundError, ValidationError, classify_errors
from bestworkers.models.schema.account import AccountEntry
from bestworkers.models.schema.profile import ProfileEntry
from bestworkers.schemas.profiles import ProfileCreate, ProfileResponse, ProfileUpdate

LOGGER = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text is matched literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


class ProfileStore:
    """Service-provider listings, one per account."""

    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory

    @classify_errors("saving profile")
    def create(self, account_id: int, payload: ProfileCreate) -> ProfileResponse:
        now = datetime.now(timezone.utc)
        try:
            with session_scope(self._session_factory) as session:
                account = session.get(AccountEntry, account_id)
                if account is None:
                    raise NotFoundError("User not found")
                entry = ProfileEntry(
                    account_id=account_id,
                    **payload.model_dump(),
                    status="pending",
                    created_at=now,
                    updated_at=now,
                )
                session.add(entry)
                account.has_profile = True
                account.updated_at = now
                session.flush()
                LOGGER.info("Profile %s created for account %s", entry.id, account_id)
                return self._to_response(entry)
        except IntegrityError as exc:
            raise ConflictError("Profile already exists for this user") from exc

    @classify_errors("fetching professionals")
    def find_by_service_name(
        self, service_name: str | None, service_category: str | None = None
    ) -> list[ProfileResponse]:
        name = (service_name or "").strip()
        if not name:
            raise ValidationError("Service name is required")
        conditions = [ProfileEntry.service_name.ilike(escape_like(name), escape=LIKE_ESCAPE)]
        category = (service_category or "").strip()
        if category:
            conditions.append(
                ProfileEntry.service_category.ilike(escape_like(category), escape=LIKE_ESCAPE)
            )
        with session_scope(self._session_factory) as session:
            entries = session.execute(
                select(ProfileEntry)
                .where(*conditions)
                .order_by(ProfileEntry.created_at, ProfileEntry.id)
            ).scalars().all()
            return [self._to_response(entry) for entry in entries]

    def get_for_account(self, account_id: int) -> ProfileResponse | None:
        with session_scope(self._session_factory) as session:
            entry = self._select_own(session, account_id)
            if entry is None:
                return None
            return self._to_response(entry)

    @classify_errors("fetching profile")
    def get_own(self, account_id: int) -> ProfileResponse:
        profile = self.get_for_account(account_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    @classify_errors("updating profile")
    def update_own(self, account_id: int, payload: ProfileUpdate) -> ProfileResponse:
        changes = payload.changes()
        with session_scope(self._session_factory) as session:
            entry = self._select_own(session, account_id)
            if entry is None:
                raise NotFoundError("Profile not found")
            for field, value in changes.items():
                setattr(entry, field, value)
            if changes:
                entry.updated_at = datetime.now(timezone.utc)
            session.flush()
            return self._to_response(entry)

    def _select_own(self, session, account_id: int) -> ProfileEntry | None:
        return session.execute(
            select(ProfileEntry).where(ProfileEntry.account_id == account_id)
        ).scalar_one_or_none()

    def _to_response(self, entry: ProfileEntry) -> ProfileResponse:
        return ProfileResponse(
            id=entry.id,
            account_id=entry.account_id,
            name=entry.name,
            email=entry.email,
            mobile_no=entry.mobile_no,
            secondary_mobile_no=entry.secondary_mobile_no,
            state=entry.state,
            district=entry.district,
            city=entry.city,
            service_category=entry.service_category,
            service_name=entry.service_name,
            designation=entry.designation,
            experience=entry.experience,
            service_price=entry.service_price,
            price_unit=entry.price_unit,
            need_support=bool(entry.need_support),
            profession_description=entry.profession_description,
            status=entry.status,
            created_at=entry.created_at,
        )


profile_store = ProfileStore()
