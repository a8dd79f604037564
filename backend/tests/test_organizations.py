from datetime import timedelta

import pytest
from django.utils import timezone

from scribe.exceptions import CreditAllocationError, PermissionDeniedError
from scribe.models import CreditTransaction, Credits, Organization, OrganizationMember
from scribe.services.credit_service import CreditService
from scribe.services.invitation_service import InvitationService
from scribe.services.notification_service import NotificationService
from scribe.services.organization_service import OrganizationService
from scribe.tasks.expire_free_credits_task import expire_free_credits_task


@pytest.fixture
def owner(make_user):
    return make_user(email="owner@lawfirm.com", full_name="Olivia Owner")


@pytest.fixture
def org(owner):
    org = OrganizationService.create_organization(owner, "Smith & Partners")
    return OrganizationService.update_organization(org.organization_id, owner, shared_credits=100)


@pytest.fixture
def member_user(make_user):
    return make_user(email="associate@lawfirm.com", full_name="Alex Associate")


@pytest.fixture
def member(org, owner, member_user):
    invitation = InvitationService.invite_member(org.organization_id, owner, member_user.email)
    return InvitationService.respond_to_invitation(invitation.member_id, member_user, True)


@pytest.mark.django_db
def test_shared_credit_change_is_recorded(org, owner):
    tx = CreditTransaction.objects.get(organization=org, type="adjustment")
    assert tx.amount == 100
    assert tx.user == owner
    assert org.remaining_credits == 100


@pytest.mark.django_db
def test_allocation_cannot_exceed_shared_pool(org, owner, member):
    OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 60)

    with pytest.raises(CreditAllocationError) as exc:
        OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 101)
    assert exc.value.details["available"] == 100

    member.refresh_from_db()
    assert member.allocated_credits == 60


@pytest.mark.django_db
def test_allocation_cannot_drop_below_used(org, owner, member, member_user):
    OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 20)
    CreditService.consume_credits(member_user, 15, "Hearing")

    with pytest.raises(CreditAllocationError):
        OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 10)


@pytest.mark.django_db
def test_shared_pool_cannot_shrink_below_allocations(org, owner, member):
    OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 70)

    with pytest.raises(CreditAllocationError):
        OrganizationService.update_organization(org.organization_id, owner, shared_credits=50)


@pytest.mark.django_db
def test_only_owner_can_allocate(org, member, member_user):
    with pytest.raises(PermissionDeniedError):
        OrganizationService.allocate_member_credits(org.organization_id, member_user, member.member_id, 10)


@pytest.mark.django_db
def test_member_consumption_uses_allocation_before_personal(org, owner, member, member_user):
    CreditService.grant_credits(member_user, 5, "approval", "Personal")
    OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 30)

    charge = CreditService.consume_credits(member_user, 10, "Hearing 1")

    assert charge["source"] == "organization"
    assert charge["member_id"] == str(member.member_id)
    member.refresh_from_db()
    org.refresh_from_db()
    assert member.used_credits == 10
    assert org.used_credits == 10
    assert Credits.objects.get(user=member_user).remaining_credits == 5

    CreditService.refund_credits(member_user, charge, "Refund")

    member.refresh_from_db()
    org.refresh_from_db()
    assert member.used_credits == 0
    assert org.used_credits == 0


@pytest.mark.django_db
def test_exhausted_allocation_falls_back_to_personal(org, owner, member, member_user):
    CreditService.grant_credits(member_user, 20, "approval", "Personal")
    OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 5)

    charge = CreditService.consume_credits(member_user, 8, "Long hearing")

    assert charge["source"] == "personal"
    assert Credits.objects.get(user=member_user).remaining_credits == 12


@pytest.mark.django_db
def test_active_free_credits_cost_nothing(org, owner, member, member_user):
    OrganizationService.admin_update_organization(
        org.organization_id,
        {"free_credits": True, "free_credits_expiry": (timezone.now() + timedelta(days=7)).isoformat()},
    )

    charge = CreditService.consume_credits(member_user, 500, "Trial hearing")

    assert charge["source"] == "free"
    assert charge["amount"] == 0
    member.refresh_from_db()
    assert member.used_credits == 0
    assert CreditTransaction.objects.filter(user=member_user, source="free", amount=0).count() == 1


@pytest.mark.django_db
def test_expire_free_credits_task(org):
    Organization.objects.filter(pk=org.pk).update(
        free_credits=True, free_credits_expiry=timezone.now() - timedelta(minutes=1)
    )
    still_free = OrganizationService.create_organization(org.owner, "Second Office")
    Organization.objects.filter(pk=still_free.pk).update(
        free_credits=True, free_credits_expiry=timezone.now() + timedelta(days=1)
    )

    result = expire_free_credits_task()

    assert result["status"] == "completed"
    assert result["organizations_expired"] == 1
    org.refresh_from_db()
    still_free.refresh_from_db()
    assert org.free_credits is False
    assert org.free_credits_expiry is not None
    assert still_free.free_credits is True


@pytest.mark.django_db
def test_alerts_for_low_pool_high_usage_and_pending_invites(org, owner, member, member_user, make_user):
    OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 90)
    CreditService.consume_credits(member_user, 86, "Trial")
    InvitationService.invite_member(org.organization_id, owner, "paralegal@lawfirm.com")

    org.refresh_from_db()
    alerts = {alert["title"]: alert for alert in NotificationService.organization_alerts(org)}

    assert alerts["Low Organization Credits"]["type"] == "error"
    assert alerts["Member Credit Usage High"]["type"] == "error"
    assert alerts["Pending Invitations"]["message"] == "You have 1 pending invitation."


@pytest.mark.django_db
def test_allocate_endpoint(client_for, org, owner, member):
    client = client_for(owner)
    url = f"/api/organizations/{org.organization_id}/members/{member.member_id}/credits/"

    response = client.put(url, {"allocated_credits": 40}, format="json")
    assert response.status_code == 200
    assert response.data["allocated_credits"] == 40

    response = client.put(url, {"allocated_credits": 400}, format="json")
    assert response.status_code == 400
    assert response.data["error_code"] == "INVALID_ALLOCATION"


@pytest.mark.django_db
def test_my_organization_for_member_includes_summary(client_for, org, owner, member, member_user):
    OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 10)

    response = client_for(member_user).get("/api/organizations/mine/")

    assert response.status_code == 200
    assert response.data["is_owner"] is False
    assert response.data["member"]["remaining_credits"] == 10


@pytest.mark.django_db
def test_stats_count_owner_as_member(client_for, org, owner, member):
    response = client_for(owner).get(f"/api/organizations/{org.organization_id}/stats/")

    assert response.status_code == 200
    assert response.data["total_members"] == 2
    assert response.data["remaining_credits"] == 100


@pytest.mark.django_db
def test_delete_organization_removes_members(client_for, org, owner, member):
    response = client_for(owner).delete(f"/api/organizations/{org.organization_id}/")

    assert response.status_code == 200
    assert not Organization.objects.filter(pk=org.pk).exists()
    assert not OrganizationMember.objects.filter(pk=member.pk).exists()
