from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local, weekday_name
from ..users.model import User
from .model import DaySchedule, GlobalPolicy, PolicyBundle, TeamPolicyOverride, TeamSchedule
from .repository import PolicyRepository


def schedule_for_day(
    policy: GlobalPolicy,
    team: Optional[TeamPolicyOverride],
    user: Optional[User],
    work_date: date,
) -> Optional[DaySchedule]:
    """Today's expected work window. First match wins:

    1. global exception for the date
    2. the user's own weekly entry
    3. the team's weekly entry (only if the team opted into custom scheduling)
    4. the global weekly entry
    """

    exception = policy.schedule.exceptions.get(work_date.isoformat())
    if exception is not None:
        return exception

    day = weekday_name(work_date)
    if user is not None and day in user.custom_schedule:
        return user.custom_schedule[day]

    if team is not None:
        team_weekly = team.schedule.resolve(TeamSchedule()).weekly
        if day in team_weekly:
            return team_weekly[day]

    return policy.schedule.weekly.get(day)


def grace_period_for(policy: GlobalPolicy, team: Optional[TeamPolicyOverride]) -> int:
    if team is not None:
        team_grace = team.schedule.resolve(TeamSchedule()).grace_period_minutes
        if team_grace is not None:
            return int(team_grace)
    return int(policy.grace_period_minutes)


class ScopeResolver:
    """Cascades configuration user -> team -> global.

    Every dimension is resolved on its own: a team may override the geofence
    and still use the global network allow-list. Reads the store on every
    call; nothing is cached between requests.
    """

    def __init__(self, policies: PolicyRepository, *, clock: Callable[[], datetime] = now_local):
        self._policies = policies
        self._clock = clock

    def _team(self, department: Optional[str]) -> Optional[TeamPolicyOverride]:
        return self._policies.get_team_override(department) if department else None

    def resolve_schedule_override(
        self, user: Optional[User], department: Optional[str], work_date: Optional[date] = None
    ) -> Optional[DaySchedule]:
        work_date = work_date or self._clock().date()
        return schedule_for_day(self._policies.get_global_policy(), self._team(department), user, work_date)

    def resolve_grace_period(self, department: Optional[str]) -> int:
        return grace_period_for(self._policies.get_global_policy(), self._team(department))

    def resolve_policy_bundle(
        self,
        department: Optional[str],
        *,
        user: Optional[User] = None,
        work_date: Optional[date] = None,
    ) -> PolicyBundle:
        work_date = work_date or self._clock().date()
        policy = self._policies.get_global_policy()
        team = self._team(department)

        allowed_ips = policy.allowed_ips
        offices = policy.office_locations
        if team is not None:
            allowed_ips = team.network.resolve(allowed_ips)
            offices = team.geofence.resolve(offices)

        return PolicyBundle(
            require_network=policy.require_network,
            require_geofence=policy.require_geofence,
            require_token=policy.require_token,
            allowed_ips=frozenset(allowed_ips),
            office_locations=tuple(offices),
            grace_period_minutes=grace_period_for(policy, team),
            schedule_for_today=schedule_for_day(policy, team, user, work_date),
        )
