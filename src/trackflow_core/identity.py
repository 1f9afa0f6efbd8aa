"""Identity provider integration (Clerk backend API).

The provider owns users, organizations and organization memberships.
Trackflow only reads from it: the caller's session arrives with each
request, and membership lists are fetched on demand for authorization.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .config import Settings, get_settings
from .errors import IdentityProviderError

logger = logging.getLogger("trackflow-core.identity")

ADMIN_ROLE = "org:admin"


@dataclass(frozen=True)
class AuthContext:
    """The caller's session as established by the identity provider.

    Attributes:
        user_id: Provider user id, None when there is no session
        org_id: Provider id of the organization currently active in the session
        org_role: Role string of the caller in ``org_id`` (e.g. "org:admin")
    """

    user_id: Optional[str] = None
    org_id: Optional[str] = None
    org_role: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)


@dataclass(frozen=True)
class OrganizationMembership:
    """One (user, role) entry of an organization's membership list."""

    user_id: str
    role: str

    @classmethod
    def from_api(cls, payload: dict) -> "OrganizationMembership":
        public_user_data = payload.get("public_user_data") or {}
        return cls(user_id=public_user_data.get("user_id", ""), role=payload.get("role", ""))


@dataclass(frozen=True)
class ProviderOrganization:
    """Organization record as returned by the provider."""

    id: str
    slug: str
    name: str


@dataclass(frozen=True)
class ProviderUser:
    """User record as returned by the provider."""

    id: str
    email: str
    name: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_api(cls, payload: dict) -> "ProviderUser":
        emails = payload.get("email_addresses") or []
        primary_id = payload.get("primary_email_address_id")
        email = ""
        for entry in emails:
            if primary_id is None or entry.get("id") == primary_id:
                email = entry.get("email_address", "")
                break
        name = " ".join(
            part for part in (payload.get("first_name"), payload.get("last_name")) if part
        ) or None
        return cls(
            id=payload["id"],
            email=email,
            name=name,
            image_url=payload.get("image_url"),
        )


class IdentityClient:
    """Read-only client for the identity provider's backend API.

    No caching and no retries: every call is one (or, for paginated
    membership lists, a few) HTTP round trips bounded by the configured
    timeout.
    """

    def __init__(
        self,
        base_url: str,
        secret_key: Optional[str] = None,
        timeout: float = 30.0,
        page_size: int = 100,
        http_client: Optional[httpx.Client] = None,
    ):
        headers = {"Accept": "application/json"}
        if secret_key:
            headers["Authorization"] = f"Bearer {secret_key}"
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout, headers=headers)
        self.page_size = page_size

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "IdentityClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.clerk_api_url,
            secret_key=settings.clerk_secret_key,
            timeout=settings.identity_timeout_seconds,
            page_size=settings.membership_page_size,
        )

    def close(self) -> None:
        self._client.close()

    def _get(self, path: str, params: Optional[dict] = None, allow_missing: bool = False) -> Optional[Any]:
        try:
            response = self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise IdentityProviderError(f"Identity provider timeout: {e}")
        except httpx.RequestError as e:
            raise IdentityProviderError(f"Identity provider unavailable: {e}")

        if allow_missing and response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.warning(f"Identity provider returned {response.status_code} for GET {path}")
            raise IdentityProviderError(
                f"Identity provider request failed: {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    def get_organization_membership_list(self, organization_id: str) -> list[OrganizationMembership]:
        """
        Fetch every membership of an organization.

        Follows the provider's limit/offset pagination until ``total_count``
        entries have been read.

        Args:
            organization_id: Provider organization id

        Returns:
            List of memberships (user id and role)
        """
        memberships: list[OrganizationMembership] = []
        offset = 0
        while True:
            payload = self._get(
                f"/organizations/{organization_id}/memberships",
                params={"limit": self.page_size, "offset": offset},
            )
            page = payload.get("data") or []
            memberships.extend(OrganizationMembership.from_api(item) for item in page)
            total = payload.get("total_count", len(memberships))
            offset += len(page)
            if not page or offset >= total:
                break

        logger.debug(f"Fetched {len(memberships)} memberships for organization {organization_id}")
        return memberships

    def get_organization(self, slug_or_id: str) -> Optional[ProviderOrganization]:
        """Fetch an organization by slug or id, None if the provider does not know it."""
        payload = self._get(f"/organizations/{slug_or_id}", allow_missing=True)
        if payload is None:
            return None
        return ProviderOrganization(id=payload["id"], slug=payload.get("slug") or payload["id"], name=payload.get("name", ""))

    def get_user(self, user_id: str) -> Optional[ProviderUser]:
        """Fetch a user by provider id, None if the provider does not know it."""
        payload = self._get(f"/users/{user_id}", allow_missing=True)
        if payload is None:
            return None
        return ProviderUser.from_api(payload)
