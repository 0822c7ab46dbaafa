import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from seo_reports.core.config import Settings
from seo_reports.core.results import ErrorKind, Result

logger = logging.getLogger(__name__)


class UserPlan(BaseModel):
    plan_id: str = "free"
    plan_name: str = "Free Plan"
    monthly_limit: int = 10
    pdf_enabled: bool = False
    ai_enabled: bool = True
    used_count: int = 0
    remaining_count: int = 10


FREE_PLAN = UserPlan()


class PlanServiceClient:
    """
    Talks to the remote plan / usage service (PostgREST-style RPC endpoints)
    to gate features and count usage.
    """

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.base_url = (settings.PLAN_SERVICE_URL or "").rstrip("/")
        self.http = http
        self.headers = {"Content-Type": "application/json"}
        if settings.PLAN_SERVICE_KEY:
            self.headers["Authorization"] = f"Bearer {settings.PLAN_SERVICE_KEY}"
            self.headers["apikey"] = settings.PLAN_SERVICE_KEY

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def _rpc(self, name: str, body: Dict[str, Any]) -> Any:
        response = await self.http.post(f"{self.base_url}/rpc/{name}", json=body, headers=self.headers)
        response.raise_for_status()
        return response.json()

    async def get_current_plan(self, user_id: str) -> Result[UserPlan]:
        try:
            data = await self._rpc("get_user_current_plan", {"_user_id": user_id})
            if isinstance(data, list):
                data = data[0] if data else None
            if not data:
                logger.info("User %s has no plan, using the free plan", user_id)
                return Result.success(FREE_PLAN.model_copy())
            # ValidationError is a ValueError
            return Result.success(UserPlan.model_validate(data))
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Plan lookup failed for user %s: %s", user_id, e)
            return Result.failure(ErrorKind.QUOTA, "Unable to verify your service plan")

    async def check_limit(self, user_id: str, feature: Optional[str] = None) -> Result[Optional[UserPlan]]:
        """Allowed only when the plan includes the feature and has usage left."""
        if not self.enabled:
            return Result.success(None)

        found = await self.get_current_plan(user_id)
        if not found.ok:
            return found
        plan = found.value

        if feature == "pdf" and not plan.pdf_enabled:
            return Result.failure(
                ErrorKind.QUOTA,
                "PDF reports are only available on paid plans. Please upgrade your plan.",
                plan=plan.model_dump(),
            )
        if feature == "ai" and not plan.ai_enabled:
            return Result.failure(
                ErrorKind.QUOTA,
                "AI features are only available on paid plans. Please upgrade your plan.",
                plan=plan.model_dump(),
            )
        if plan.remaining_count <= 0:
            return Result.failure(
                ErrorKind.QUOTA,
                f"You have used all analyses for this month ({plan.used_count}/{plan.monthly_limit}). "
                "Please upgrade your plan or wait for next month.",
                plan=plan.model_dump(),
            )
        return Result.success(plan)

    async def increment_usage(self, user_id: str) -> bool:
        if not self.enabled:
            return True
        try:
            data = await self._rpc("increment_user_usage", {"_user_id": user_id})
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Usage increment failed for user %s: %s", user_id, e)
            return False
        return data is True
