"""Team and member data models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .base import RecordModel

IN_PROCESS_BACKEND = "in-process"
LEAD_AGENT_TYPE = "team-lead"


class Member(RecordModel):
    """One agent participating in a team (embedded in the team config)."""

    name: str
    agent_id: str = Field(default="", alias="agentId")
    agent_type: str = Field(default="", alias="agentType")
    model: str = ""
    joined_at: int | float | None = Field(default=None, alias="joinedAt")
    tmux_pane_id: str | None = Field(default=None, alias="tmuxPaneId")
    cwd: str | None = None
    subscriptions: list[str] = Field(default_factory=list)
    prompt: str | None = None
    color: str | None = None
    plan_mode_required: bool | None = Field(default=None, alias="planModeRequired")
    backend_type: str | None = Field(default=None, alias="backendType")

    @property
    def is_online(self) -> bool:
        """A pane id means online; in-process members have no pane but count too."""
        return bool(self.tmux_pane_id) or self.backend_type == IN_PROCESS_BACKEND

    @property
    def is_lead(self) -> bool:
        return self.agent_type == LEAD_AGENT_TYPE


class TeamSummary(BaseModel):
    """Team list entry returned by the route layer."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    created_at: int | float | None = Field(default=None, alias="createdAt")
    lead_agent_id: str = Field(alias="leadAgentId")
    member_count: int = Field(alias="memberCount")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class TeamConfig(RecordModel):
    """A team as described by its config.json.

    The identity is ``name`` from the file content, which may differ from the
    directory the file lives in.
    """

    name: str = Field(min_length=1)
    description: str = ""
    created_at: int | float | None = Field(default=None, alias="createdAt")
    lead_agent_id: str = Field(default="", alias="leadAgentId")
    lead_session_id: str = Field(default="", alias="leadSessionId")
    members: list[Member] = Field(default_factory=list)

    def get_member(self, member_name: str) -> Member | None:
        for member in self.members:
            if member.name == member_name:
                return member
        return None

    def summary(self) -> TeamSummary:
        return TeamSummary(
            name=self.name,
            description=self.description,
            created_at=self.created_at,
            lead_agent_id=self.lead_agent_id,
            member_count=len(self.members),
        )
