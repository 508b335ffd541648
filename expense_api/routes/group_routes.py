from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from expense_api.database import get_db
from expense_api.dependencies import get_current_user
from expense_api.models.user import User
from expense_api.services.group_service import GroupService
from expense_api.services.invitation_service import InvitationService
from expense_api.schemas.group_schemas import (
    GroupCreate,
    GroupResponse,
    UserGroupResponse,
    GroupDetailResponse,
    GroupInviteRequest,
    GroupInviteResponse,
    InvitationResponse,
    AcceptInvitationRequest,
    AcceptInvitationResponse,
)

router = APIRouter()


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_group(
    data: GroupCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a new group.

    The creator becomes the first member.
    """
    service = GroupService(db)
    return service.create_group(data.name, user)


@router.get("", response_model=list[UserGroupResponse])
def list_user_groups(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List all groups the authenticated user belongs to"""
    service = GroupService(db)
    return service.list_user_groups(user)


@router.post(
    "/accept-invitation",
    response_model=AcceptInvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
def accept_invitation(
    data: AcceptInvitationRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Join a group by presenting an invitation token.

    - Each token can be accepted once
    - Returns 400 if the token is unknown, used, or expired
    """
    service = InvitationService(db)
    membership = service.accept(data.token, user)
    return {"message": "Successfully joined the group", "membership": membership}


@router.get("/{group_id}", response_model=GroupDetailResponse)
def get_group_details(
    group_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Get group details including members.

    - **Requires membership**
    """
    service = GroupService(db)
    return service.get_group_details(group_id, user)


@router.post("/{group_id}/invite", response_model=GroupInviteResponse)
def invite_to_group(
    group_id: int,
    data: GroupInviteRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Invite an email address to the group.

    - **Requires membership**
    - The token is returned directly; delivering it is up to the caller
    - Returns 400 if the address already belongs to a member
    """
    service = InvitationService(db)
    invitation = service.issue(group_id, data.email, user)
    return GroupInviteResponse(
        message="Invitation created successfully",
        invitation_token=invitation.token,
        expires_at=invitation.expires_at,
    )


@router.get("/{group_id}/invitations", response_model=list[InvitationResponse])
def list_invitations(
    group_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List invitations issued for the group with their status.

    - **Requires membership**
    - Tokens are never included
    """
    service = InvitationService(db)
    return service.list_for_group(group_id, user)
