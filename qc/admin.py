from django.contrib import admin

from .models import DeviceStatus, Operator, QCReport
from .services.export import checkpoint_summary


# ----------------------------
# OPERATORS
# ----------------------------

@admin.register(Operator)
class OperatorAdmin(admin.ModelAdmin):
    list_display = ("user_id", "assigned_stage", "is_active", "is_admin", "created_at")
    list_filter = ("assigned_stage", "is_active", "is_admin")
    search_fields = ("user_id",)
    ordering = ("user_id",)
    exclude = ("password",)

    def get_readonly_fields(self, request, obj=None):
        # user_id is the key; it never changes after creation
        if obj is not None:
            return ("user_id", "created_at")
        return ("created_at",)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_admin:
            return False
        return super().has_delete_permission(request, obj)


# ----------------------------
# REPORTS (read-only, append-only)
# ----------------------------

@admin.register(QCReport)
class QCReportAdmin(admin.ModelAdmin):
    list_display = ("id", "timestamp", "stage", "user_id", "device_id", "summary")
    list_filter = ("stage", "user_id")
    search_fields = ("id", "device_id", "user_id")
    date_hierarchy = "timestamp"
    ordering = ("-timestamp",)

    def summary(self, obj: QCReport):
        return checkpoint_summary(obj.checkpoints)
    summary.short_description = "Checkpoints"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(DeviceStatus)
class DeviceStatusAdmin(admin.ModelAdmin):
    list_display = ("device_id", "fqc_status", "packaging_status", "last_updated")
    list_filter = ("fqc_status", "packaging_status")
    search_fields = ("device_id",)
    date_hierarchy = "last_updated"
    ordering = ("-last_updated",)
    readonly_fields = ("last_updated",)
