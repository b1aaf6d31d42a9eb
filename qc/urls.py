from django.urls import path
from . import views

urlpatterns = [
    # Health / session
    path("health/", views.health, name="qc-health"),
    path("api/qc/session/", views.session_state, name="qc-session"),

    # ----------------------------
    # Stage selection + login
    # ----------------------------
    path("api/qc/stage/", views.select_stage, name="qc-select-stage"),
    path("api/qc/admin/open/", views.open_admin, name="qc-open-admin"),
    path("api/qc/login/", views.login, name="qc-login"),
    path("api/qc/logout/", views.logout, name="qc-logout"),
    path("api/qc/back/", views.back, name="qc-back"),

    # ----------------------------
    # Device identification
    # ----------------------------
    path("api/qc/device/", views.enter_device, name="qc-device"),
    path("api/qc/device/photo/", views.device_photo, name="qc-device-photo"),
    path("api/qc/scan/start/", views.scan_start, name="qc-scan-start"),
    path("api/qc/scan/decoded/", views.scan_decoded, name="qc-scan-decoded"),
    path("api/qc/scan/cancel/", views.scan_cancel, name="qc-scan-cancel"),

    # ----------------------------
    # Checklist
    # ----------------------------
    path("api/qc/checkpoints/add/", views.checkpoint_add, name="qc-checkpoint-add"),
    path("api/qc/checkpoints/<str:checkpoint_id>/", views.checkpoint_update, name="qc-checkpoint-update"),
    path("api/qc/checkpoints/<str:checkpoint_id>/remove/", views.checkpoint_remove, name="qc-checkpoint-remove"),
    path(
        "api/qc/checkpoints/<str:checkpoint_id>/suggest-reason/",
        views.checkpoint_suggest_reason,
        name="qc-checkpoint-suggest-reason",
    ),
    path("api/qc/checklist/leave/", views.checklist_leave, name="qc-checklist-leave"),
    path("api/qc/submit/", views.submit, name="qc-submit"),
    path("api/qc/next-device/", views.next_device, name="qc-next-device"),

    # ----------------------------
    # Admin console
    # ----------------------------
    path("api/qc/admin/users/", views.users, name="qc-users"),
    path("api/qc/admin/users/search/", views.user_search, name="qc-user-search"),
    path("api/qc/admin/users/<str:user_id>/", views.user_update, name="qc-user-update"),
    path("api/qc/admin/users/<str:user_id>/toggle/", views.user_toggle, name="qc-user-toggle"),
    path("api/qc/admin/users/<str:user_id>/delete/", views.user_delete, name="qc-user-delete"),

    path("api/qc/dashboard/open/", views.dashboard_open, name="qc-dashboard-open"),
    path("api/qc/dashboard/close/", views.dashboard_close, name="qc-dashboard-close"),
    path("api/qc/dashboard/", views.dashboard, name="qc-dashboard"),
    path("api/qc/export.csv", views.export_csv, name="qc-export"),
]
