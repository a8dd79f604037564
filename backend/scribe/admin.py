from django.contrib import admin

from .models import (
    CreditRequest,
    CreditTransaction,
    Credits,
    Organization,
    OrganizationMember,
    Payment,
    Transcription,
)


@admin.register(Credits)
class CreditsAdmin(admin.ModelAdmin):
    list_display = ("user", "total_credits", "remaining_credits", "used_credits", "updated_at")
    search_fields = ("user__email",)


@admin.register(CreditRequest)
class CreditRequestAdmin(admin.ModelAdmin):
    list_display = ("request_id", "user", "status", "credits_approved", "created_at")
    list_filter = ("status",)
    ordering = ("-created_at",)
    readonly_fields = ("status", "credits_approved", "resolved_at")


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "user", "organization", "type", "source", "amount", "created_at")
    list_filter = ("type", "source")
    ordering = ("-created_at",)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "shared_credits", "used_credits", "free_credits", "created_at")
    ordering = ("-created_at",)


@admin.register(OrganizationMember)
class OrganizationMemberAdmin(admin.ModelAdmin):
    list_display = ("email", "organization", "status", "allocated_credits", "used_credits", "invited_at")
    list_filter = ("status",)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("payment_id", "user", "amount", "credits_purchased", "status", "created_at")
    list_filter = ("status", "payment_type")
    ordering = ("-created_at",)


@admin.register(Transcription)
class TranscriptionAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "status", "audio_duration", "credits_charged", "created_at")
    list_filter = ("status",)
    ordering = ("-created_at",)
