"""Team and user lookups that decide which users a run targets."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.exceptions import IntegrationError, with_context
from core.models import OnCallContext, Team, User
from core.pagination import Paginator
from core.utils import difference, unique

if TYPE_CHECKING:
    from app.config import Settings
    from integrations.base import AlertingProvider

logger = logging.getLogger(__name__)


class TeamResolver:
    def __init__(self, provider: AlertingProvider, paginator: Paginator) -> None:
        self._provider = provider
        self._paginator = paginator

    async def get_teams(self, team_ids: list[str]) -> list[Team]:
        teams: list[Team] = []
        for team_id in team_ids:
            try:
                teams.append(await self._provider.get_team(team_id))
            except IntegrationError as e:
                raise with_context(e, f"failed to find team '{team_id}'") from e
        return teams

    async def get_team_member_ids(self, teams: list[Team]) -> list[str]:
        """Return the user ids of every member of *teams*, each id once, in first-seen order."""
        member_ids: list[str] = []
        for team in teams:
            try:
                members = await self._paginator.collect(
                    lambda offset, limit, team_id=team.id: self._provider.list_team_members_page(
                        team_id, offset, limit
                    ),
                    label=f"members of {team.id}",
                )
            except IntegrationError as e:
                raise with_context(e, f"failed to retrieve users for team '{team.id}'") from e
            member_ids.extend(m.user.id for m in members)
        return unique(member_ids)

    async def get_user(self, user_id: str) -> User:
        try:
            return await self._provider.get_user(user_id)
        except IntegrationError as e:
            raise with_context(e, f"failed to find user '{user_id}'") from e

    async def get_current_user(self) -> User:
        try:
            return await self._provider.get_current_user()
        except IntegrationError as e:
            raise with_context(e, "failed to retrieve current user") from e

    async def resolve_context(self, settings: Settings) -> OnCallContext:
        """Resolve the configured teams and users into the set of users to target.

        The ignored users are looked up as well, so a typo in the ignore list
        fails the run instead of silently targeting everyone.
        """
        current_user = await self.get_current_user()
        teams = await self.get_teams(settings.teams)
        member_ids = await self.get_team_member_ids(teams)
        silent_user = await self.get_user(settings.silent_user) if settings.silent_user else None
        ignored_users = [await self.get_user(user_id) for user_id in settings.ignored_users]

        targeted = difference(member_ids, settings.ignored_users)
        logger.info(
            "Targeting %d of %d team member(s) across %d team(s)",
            len(targeted), len(member_ids), len(teams),
        )
        return OnCallContext(
            current_user=current_user,
            teams=teams,
            member_ids=member_ids,
            silent_user=silent_user,
            ignored_users=ignored_users,
            targeted_user_ids=targeted,
        )
