from django.contrib import admin

from registrations.models import (
    EventDistance,
    EventEdition,
    GroupDiscountRule,
    PricingTier,
    Registration,
)


class EventDistanceInline(admin.TabularInline):
    model = EventDistance
    extra = 1


class PricingTierInline(admin.TabularInline):
    model = PricingTier
    extra = 1


@admin.register(EventEdition)
class EventEditionAdmin(admin.ModelAdmin):
    list_display = ["label", "visibility", "registration_opens_at", "registration_closes_at"]
    list_filter = ["visibility", "is_registration_paused"]
    search_fields = ["label"]
    inlines = [EventDistanceInline]


@admin.register(EventDistance)
class EventDistanceAdmin(admin.ModelAdmin):
    list_display = ["label", "edition", "capacity", "capacity_scope"]
    list_filter = ["edition"]
    inlines = [PricingTierInline]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["id", "distance", "buyer_user_id", "status", "total_cents", "expires_at"]
    list_filter = ["status", "edition"]
    search_fields = ["buyer_user_id"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(GroupDiscountRule)
class GroupDiscountRuleAdmin(admin.ModelAdmin):
    list_display = ["edition", "min_participants", "percent_off", "is_active"]
    list_filter = ["edition", "is_active"]
