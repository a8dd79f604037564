from django.urls import path

from .views.credit_views import get_credit_balance, get_credit_history, credit_requests
from .views.organization_views import (
    create_organization,
    get_my_organization,
    organization_detail,
    list_members,
    allocate_member_credits,
    member_credit_summary,
    member_activity,
    organization_stats,
    organization_alerts,
)
from .views.invitation_views import (
    invite_member,
    pending_invitations,
    respond_to_invitation,
    my_memberships,
    remove_member,
    leave_organization,
)
from .views.payment_views import payment_catalogue, start_payment, payment_history
from .views.stripe_webhook_view import stripe_webhook
from .views.transcription_views import (
    upload_transcription,
    list_transcriptions,
    transcription_detail,
    export_transcription,
    transcription_engine_status,
)
from .views.ai_views import process_transcription
from .views.message_views import (
    inbox,
    mark_message_read,
    reply_to_admin,
    list_notifications,
    mark_notification_read,
    mark_all_notifications_read,
)
from .views.project_views import projects, project_detail, create_hearing, hearing_detail
from .views import admin_views


urlpatterns = [
    # Credits
    path("credits/", get_credit_balance, name="credit-balance"),
    path("credits/history/", get_credit_history, name="credit-history"),
    path("credits/requests/", credit_requests, name="credit-requests"),

    # Organizations
    path("organizations/", create_organization, name="create-organization"),
    path("organizations/mine/", get_my_organization, name="my-organization"),
    path("organizations/<uuid:organization_id>/", organization_detail, name="organization-detail"),
    path("organizations/<uuid:organization_id>/stats/", organization_stats, name="organization-stats"),
    path("organizations/<uuid:organization_id>/alerts/", organization_alerts, name="organization-alerts"),

    # Members & Invitations
    path("organizations/<uuid:organization_id>/members/", list_members, name="list-members"),
    path("organizations/<uuid:organization_id>/members/invite/", invite_member, name="invite-member"),
    path("organizations/<uuid:organization_id>/members/<uuid:member_id>/", remove_member, name="remove-member"),
    path(
        "organizations/<uuid:organization_id>/members/<uuid:member_id>/credits/",
        allocate_member_credits,
        name="allocate-member-credits",
    ),
    path(
        "organizations/<uuid:organization_id>/members/<uuid:member_id>/summary/",
        member_credit_summary,
        name="member-credit-summary",
    ),
    path(
        "organizations/<uuid:organization_id>/members/<uuid:member_id>/activity/",
        member_activity,
        name="member-activity",
    ),
    path("invitations/", pending_invitations, name="pending-invitations"),
    path("invitations/<uuid:member_id>/respond/", respond_to_invitation, name="respond-invitation"),
    path("memberships/", my_memberships, name="my-memberships"),
    path("memberships/<uuid:member_id>/leave/", leave_organization, name="leave-organization"),

    # Payments
    path("payments/catalogue/", payment_catalogue, name="payment-catalogue"),
    path("payments/", start_payment, name="start-payment"),
    path("payments/history/", payment_history, name="payment-history"),
    path("webhooks/stripe/", stripe_webhook, name="stripe-webhook"),

    # Transcriptions
    path("transcriptions/", list_transcriptions, name="list-transcriptions"),
    path("transcriptions/upload/", upload_transcription, name="upload-transcription"),
    path("transcriptions/engine/", transcription_engine_status, name="transcription-engine-status"),
    path("transcriptions/<uuid:transcription_id>/", transcription_detail, name="transcription-detail"),
    path("transcriptions/<uuid:transcription_id>/export/", export_transcription, name="export-transcription"),
    path("transcriptions/<uuid:transcription_id>/process/", process_transcription, name="process-transcription"),

    # Projects & Hearings
    path("projects/", projects, name="projects"),
    path("projects/<uuid:project_id>/", project_detail, name="project-detail"),
    path("projects/<uuid:project_id>/hearings/", create_hearing, name="create-hearing"),
    path("hearings/<uuid:hearing_id>/", hearing_detail, name="hearing-detail"),

    # Messages & Notifications
    path("messages/", inbox, name="inbox"),
    path("messages/reply/", reply_to_admin, name="reply-to-admin"),
    path("messages/<uuid:message_id>/read/", mark_message_read, name="mark-message-read"),
    path("notifications/", list_notifications, name="list-notifications"),
    path("notifications/read-all/", mark_all_notifications_read, name="mark-all-notifications-read"),
    path("notifications/<uuid:notification_id>/read/", mark_notification_read, name="mark-notification-read"),

    # Admin
    path("admin/users/", admin_views.list_users, name="admin-list-users"),
    path("admin/users/<uuid:user_id>/", admin_views.user_details, name="admin-user-details"),
    path("admin/users/<uuid:user_id>/role/", admin_views.toggle_user_role, name="admin-toggle-role"),
    path("admin/users/<uuid:user_id>/suspend/", admin_views.toggle_user_suspension, name="admin-toggle-suspension"),
    path("admin/users/<uuid:user_id>/messages/", admin_views.send_message, name="admin-send-message"),
    path("admin/credit-requests/", admin_views.list_credit_requests, name="admin-credit-requests"),
    path(
        "admin/credit-requests/<uuid:request_id>/approve/",
        admin_views.approve_credit_request,
        name="admin-approve-credit-request",
    ),
    path(
        "admin/credit-requests/<uuid:request_id>/decline/",
        admin_views.decline_credit_request,
        name="admin-decline-credit-request",
    ),
    path("admin/organizations/", admin_views.list_organizations, name="admin-list-organizations"),
    path("admin/organizations/<uuid:organization_id>/", admin_views.manage_organization, name="admin-manage-organization"),
    path(
        "admin/organizations/<uuid:organization_id>/members/",
        admin_views.organization_members,
        name="admin-organization-members",
    ),
    path("admin/payments/", admin_views.list_payments, name="admin-list-payments"),
    path("admin/payments/export/", admin_views.export_payments_csv, name="admin-export-payments"),
    path("admin/stats/", admin_views.admin_stats, name="admin-stats"),
]
