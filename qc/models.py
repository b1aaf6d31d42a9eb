from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils import timezone


# -----------------------------
# Shared choices
# -----------------------------
STAGE_FQC = "FQC"
STAGE_PACKAGING = "Packaging"

STAGE_CHOICES = [
    (STAGE_FQC, "FQC Inspection"),
    (STAGE_PACKAGING, "Packaging & QC"),
]

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

DEVICE_STATUS_CHOICES = [
    (STATUS_PENDING, "pending"),
    (STATUS_COMPLETED, "completed"),
    (STATUS_FAILED, "failed"),
]


# -----------------------------
# Operators
# -----------------------------
class Operator(models.Model):
    """
    A shared-terminal login. Not tied to django.contrib.auth: operators sign in
    with a user id + PIN-style password against an assigned stage.
    """
    user_id = models.CharField(max_length=64, primary_key=True)
    password = models.CharField(max_length=128)

    is_admin = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    assigned_stage = models.CharField(max_length=16, choices=STAGE_CHOICES, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "user_id"]

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        return check_password(raw_password, self.password)

    def __str__(self):
        return self.user_id


# -----------------------------
# Reports (append-only)
# -----------------------------
class QCReport(models.Model):
    """
    One submitted inspection session. Written exactly once.
    checkpoints holds the ordered snapshot:
    [{"id", "label", "status", "image", "reason"}, ...]
    """
    id = models.CharField(max_length=40, primary_key=True)
    timestamp = models.DateTimeField(default=timezone.now)

    stage = models.CharField(max_length=16, choices=STAGE_CHOICES)
    user_id = models.CharField(max_length=64)
    device_id = models.CharField(max_length=128, db_index=True)

    checkpoints = models.JSONField(default=list)

    class Meta:
        ordering = ["timestamp", "id"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError(f"Report {self.id} is immutable once stored.")
        kwargs["force_insert"] = True
        super().save(*args, **kwargs)

    @property
    def any_failed(self):
        return any(cp.get("status") == "Fail" for cp in self.checkpoints)

    def __str__(self):
        return f"{self.id} • {self.stage} • {self.device_id}"


# -----------------------------
# Per-device stage outcome
# -----------------------------
class DeviceStatus(models.Model):
    device_id = models.CharField(max_length=128, primary_key=True)

    fqc_status = models.CharField(max_length=16, choices=DEVICE_STATUS_CHOICES, default=STATUS_PENDING)
    packaging_status = models.CharField(max_length=16, choices=DEVICE_STATUS_CHOICES, default=STATUS_PENDING)

    last_updated = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name_plural = "device statuses"
        ordering = ["-last_updated"]

    def __str__(self):
        return f"{self.device_id} (FQC {self.fqc_status}, Packaging {self.packaging_status})"
