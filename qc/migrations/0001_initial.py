import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Operator",
            fields=[
                ("user_id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("password", models.CharField(max_length=128)),
                ("is_admin", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "assigned_stage",
                    models.CharField(
                        blank=True,
                        choices=[("FQC", "FQC Inspection"), ("Packaging", "Packaging & QC")],
                        default="",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["created_at", "user_id"],
            },
        ),
        migrations.CreateModel(
            name="QCReport",
            fields=[
                ("id", models.CharField(max_length=40, primary_key=True, serialize=False)),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "stage",
                    models.CharField(
                        choices=[("FQC", "FQC Inspection"), ("Packaging", "Packaging & QC")],
                        max_length=16,
                    ),
                ),
                ("user_id", models.CharField(max_length=64)),
                ("device_id", models.CharField(db_index=True, max_length=128)),
                ("checkpoints", models.JSONField(default=list)),
            ],
            options={
                "ordering": ["timestamp", "id"],
            },
        ),
        migrations.CreateModel(
            name="DeviceStatus",
            fields=[
                ("device_id", models.CharField(max_length=128, primary_key=True, serialize=False)),
                (
                    "fqc_status",
                    models.CharField(
                        choices=[("pending", "pending"), ("completed", "completed"), ("failed", "failed")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "packaging_status",
                    models.CharField(
                        choices=[("pending", "pending"), ("completed", "completed"), ("failed", "failed")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("last_updated", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "verbose_name_plural": "device statuses",
                "ordering": ["-last_updated"],
            },
        ),
    ]
