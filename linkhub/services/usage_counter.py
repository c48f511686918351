from dataclasses import dataclass

from ..models.resources import Block, Link, Page, Social, TeamMember


@dataclass(frozen=True)
class UsageSnapshot:
    links: int = 0
    pages: int = 0
    blocks: int = 0
    socials: int = 0
    team_members: int = 0

    def as_dict(self) -> dict:
        return {
            "currentLinks": self.links,
            "currentPages": self.pages,
            "currentBlocks": self.blocks,
            "currentSocials": self.socials,
            "currentTeamMembers": self.team_members,
        }


def count_usage(tenant_id: int) -> UsageSnapshot:
    # Links and blocks can be switched off; only live ones count.
    links = Link.query.filter(Link.user_id == tenant_id, Link.active.is_(True)).count()
    blocks = Block.query.filter(Block.user_id == tenant_id, Block.active.is_(True)).count()
    pages = Page.query.filter(Page.user_id == tenant_id).count()
    socials = Social.query.filter(Social.user_id == tenant_id).count()
    team_members = TeamMember.query.filter(
        TeamMember.owner_id == tenant_id,
        TeamMember.status != "deactivated",
    ).count()

    return UsageSnapshot(
        links=links,
        pages=pages,
        blocks=blocks,
        socials=socials,
        team_members=team_members,
    )
