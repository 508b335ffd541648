from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from expense_api.models.group_invitation import InvitationStatus


class GroupCreate(BaseModel):
    """Create a new group (creator joins automatically)"""

    name: str = Field(..., min_length=1, max_length=255)


class GroupResponse(BaseModel):
    """Group details response"""

    id: int
    name: str
    created_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserGroupResponse(GroupResponse):
    """Group the user belongs to, with member count"""

    member_count: int


class GroupMemberResponse(BaseModel):
    """Group member with user info"""

    id: int  # User ID
    username: str
    email: str
    joined_at: datetime


class GroupDetailResponse(GroupResponse):
    """Group with its current members"""

    members: list[GroupMemberResponse]


class GroupInviteRequest(BaseModel):
    """Invite an email address to a group"""

    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class GroupInviteResponse(BaseModel):
    """Response after issuing an invitation"""

    message: str
    invitation_token: str
    expires_at: datetime


class InvitationResponse(BaseModel):
    """Invitation listing entry with derived status"""

    id: int
    group_id: int
    invited_email: str
    invited_by: int | None
    created_at: datetime
    expires_at: datetime
    status: InvitationStatus


class AcceptInvitationRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=64)


class MembershipResponse(BaseModel):
    model_config = {"from_attributes": True}

    group_id: int
    user_id: int
    joined_at: datetime


class AcceptInvitationResponse(BaseModel):
    message: str
    membership: MembershipResponse
