"""Sign-in state and page navigation for one user of the back office."""

import uuid
from enum import Enum

from agency_desk.auth.interfaces import IAuthProvider
from agency_desk.auth.passwords import password_error
from agency_desk.common.logging import bind_tenant, clear_tenant, get_logger
from agency_desk.desk import AgencyDesk
from agency_desk.domain.errors import AuthorizationError, NotFoundError, ValidationError
from agency_desk.domain.models import Business, ManagedAgent, TenantContext, UserRole
from agency_desk.storage.interfaces import IBackendStore

logger = get_logger(__name__)


class Page(str, Enum):
    """Navigable pages."""

    HOME = "home"
    LOGIN = "login"
    REGISTER_BUSINESS = "register_business"
    ROLE_SELECTION = "role_selection"
    SUBMIT = "submit"
    DAILY = "daily"
    MONTHLY = "monthly"
    REFERRAL = "referral"
    PROGRESS = "progress"
    UPLOAD = "upload"
    SETTINGS = "settings"
    MANAGE_AGENTS = "manage_agents"


PUBLIC_PAGES = frozenset({Page.HOME, Page.LOGIN, Page.REGISTER_BUSINESS})

ROLE_PAGES: dict[UserRole, tuple[Page, ...]] = {
    UserRole.ADMIN: (
        Page.DAILY,
        Page.MONTHLY,
        Page.REFERRAL,
        Page.PROGRESS,
        Page.UPLOAD,
        Page.SUBMIT,
        Page.SETTINGS,
        Page.MANAGE_AGENTS,
    ),
    UserRole.ENTRY_AGENT: (Page.SUBMIT,),
}

DEFAULT_PAGES = {UserRole.ADMIN: Page.DAILY, UserRole.ENTRY_AGENT: Page.SUBMIT}


class Session:
    """State machine from the public pages through business sign-in and role
    selection to the dashboard pages.
    """

    def __init__(self, auth: IAuthProvider, backend: IBackendStore, desk: AgencyDesk):
        self.auth = auth
        self.backend = backend
        self.desk = desk
        self.business: Business | None = None
        self.role: UserRole | None = None
        self.agent: ManagedAgent | None = None
        self.page = Page.HOME

    @property
    def is_authenticated(self) -> bool:
        return self.business is not None

    @property
    def current_user(self) -> str | None:
        """Display name of the acting user."""
        if self.agent is not None:
            return self.agent.agent_name
        if self.role is UserRole.ADMIN and self.business is not None:
            return self.business.owner_name
        return None

    @property
    def context(self) -> TenantContext:
        """Tenant context for desk calls.

        Raises:
            AuthorizationError: If no business is signed in or no role is chosen.
        """
        if self.business is None or self.role is None:
            raise AuthorizationError("Please sign in and select a role first.")
        return TenantContext(
            tenant_id=self.business.id, actor=self.current_user or "", role=self.role
        )

    def allowed_pages(self) -> tuple[Page, ...]:
        """Pages reachable in the current state."""
        if self.business is None:
            return tuple(PUBLIC_PAGES)
        if self.role is None:
            return (Page.ROLE_SELECTION,)
        return ROLE_PAGES[self.role]

    def navigate(self, page: Page | str) -> Page:
        """Go to a page.

        Raises:
            AuthorizationError: If the page needs a sign-in or role the
                session does not have.
        """
        page = Page(page)
        if page not in PUBLIC_PAGES and page not in self.allowed_pages():
            raise AuthorizationError("You do not have access to this page.")
        self.page = page
        return page

    # --- Business account ---

    def register_business(
        self,
        *,
        business_name: str,
        owner_name: str,
        email: str,
        password: str,
        phone: str = "",
    ) -> Business:
        """Create the auth account, then the business record.

        The session is only updated once both steps succeed.

        Raises:
            ValidationError: If a required field is missing or the password is rejected.
            AuthorizationError: If the auth provider rejects the sign-up.
        """
        for value, field, label in (
            (business_name, "business_name", "Business name"),
            (owner_name, "owner_name", "Owner name"),
            (email, "email", "Email"),
        ):
            if not value or not value.strip():
                raise ValidationError(f"{label} is required.", field=field)
        problem = password_error(password)
        if problem:
            raise ValidationError(problem, field="password")

        result = self.auth.sign_up(
            email, password, {"business_name": business_name, "owner_name": owner_name}
        )
        if result.error or not result.data:
            raise AuthorizationError(result.error or "Registration failed.")

        business = self.backend.create_business(
            Business(
                id=str(uuid.uuid4()),
                business_name=business_name.strip(),
                owner_name=owner_name.strip(),
                email=email.strip().lower(),
                phone=phone.strip(),
                auth_user_id=result.data["user"]["id"],
            )
        )
        self._enter_business(business)
        logger.info("business_registered", business_id=business.id)
        return business

    def login_business(self, email: str, password: str) -> Business:
        """Sign a business in and move to role selection.

        Raises:
            AuthorizationError: If the credentials are rejected.
            NotFoundError: If no business is linked to the account.
        """
        result = self.auth.sign_in(email, password)
        if result.error or not result.data:
            raise AuthorizationError(result.error or "Login failed. Please try again.")

        business = self.backend.find_business_by_email(email)
        if business is None:
            raise NotFoundError("No business found for this account.")
        self._enter_business(business)
        logger.info("business_logged_in", business_id=business.id)
        return business

    def _enter_business(self, business: Business) -> None:
        self.business = business
        bind_tenant(business.id)
        self.role = None
        self.agent = None
        self.page = Page.ROLE_SELECTION

    # --- Role selection ---

    def select_admin(self) -> Page:
        """Continue as the business admin."""
        if self.business is None:
            raise AuthorizationError("Please sign in first.")
        self.role = UserRole.ADMIN
        self.agent = None
        bind_tenant(self.business.id, self.business.owner_name)
        self.page = DEFAULT_PAGES[UserRole.ADMIN]
        return self.page

    def login_agent(self, agent_id: str, password: str) -> ManagedAgent:
        """Continue as one of the business's entry agents.

        Raises:
            NotFoundError: If the agent does not belong to the business.
            AuthorizationError: If the agent is inactive or the password is wrong.
        """
        if self.business is None:
            raise AuthorizationError("Please sign in first.")
        lookup = TenantContext(tenant_id=self.business.id, actor=self.business.owner_name)
        agent = self.desk.authenticate_agent(lookup, agent_id, password)
        self.role = UserRole.ENTRY_AGENT
        self.agent = agent
        bind_tenant(self.business.id, agent.agent_name)
        self.page = DEFAULT_PAGES[UserRole.ENTRY_AGENT]
        return agent

    def logout(self) -> None:
        """Sign out. Local state is cleared even if the provider fails."""
        try:
            result = self.auth.sign_out()
            if result.error:
                logger.warning("sign_out_failed", error=result.error)
        except Exception as e:
            logger.error("sign_out_error", error=str(e))

        self.business = None
        self.role = None
        self.agent = None
        self.page = Page.HOME
        logger.info("logged_out")
        clear_tenant()
