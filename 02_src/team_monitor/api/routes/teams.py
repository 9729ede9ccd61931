"""Read-only team, member, message and task routes."""

from fastapi import APIRouter, HTTPException

from ...app import IApplication
from ...models import Task, TeamConfig, TeamSummary


def create_teams_router(app: IApplication) -> APIRouter:
    """Create teams router."""
    router = APIRouter(prefix="/api/teams", tags=["teams"])

    def _team_or_404(name: str) -> TeamConfig:
        team = app.store.get_team(name)
        if team is None:
            raise HTTPException(status_code=404, detail="Team not found")
        return team

    @router.get("", response_model=list[TeamSummary])
    async def list_teams() -> list[TeamSummary]:
        """List all teams."""
        return app.store.list_team_summaries()

    @router.get("/{name}")
    async def get_team(name: str) -> dict:
        """Full configuration of one team."""
        return _team_or_404(name).to_dict()

    @router.get("/{name}/members")
    async def list_members(name: str) -> list[dict]:
        """Members of a team, in config order."""
        return [member.to_dict() for member in _team_or_404(name).members]

    @router.get("/{name}/members/{member}")
    async def get_member(name: str, member: str) -> dict:
        """One member's details."""
        found = _team_or_404(name).get_member(member)
        if found is None:
            raise HTTPException(status_code=404, detail="Member not found")
        return found.to_dict()

    @router.get("/{name}/messages/{member}")
    async def get_messages(name: str, member: str) -> list[dict]:
        """A member's inbox, oldest first."""
        if _team_or_404(name).get_member(member) is None:
            raise HTTPException(status_code=404, detail="Member not found")
        return [m.to_dict() for m in app.store.get_messages(name, member)]

    @router.get(
        "/{name}/tasks",
        response_model=list[Task],
        response_model_exclude_none=True,
    )
    async def list_tasks(name: str) -> list[Task]:
        """All tasks of a team."""
        _team_or_404(name)
        return app.store.get_tasks(name)

    @router.get(
        "/{name}/tasks/{task_id}",
        response_model=Task,
        response_model_exclude_none=True,
    )
    async def get_task(name: str, task_id: str) -> Task:
        """One task."""
        _team_or_404(name)
        task = app.store.get_task(name, task_id)
        if task is None:
            raise HTTPException(status_code=404, detail="Task not found")
        return task

    return router
