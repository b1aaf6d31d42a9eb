# qc/tests/test_views.py
import io

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from qc import store
from qc.models import QCReport
from qc.tests.helpers import PHOTO


def _login(client, stage, user_id, password):
    if stage is None:
        client.post_json("/api/qc/admin/open/")
    else:
        client.post_json("/api/qc/stage/", {"stage": stage})
    return client.post_json("/api/qc/login/", {"user_id": user_id, "password": password})


def _fill_checklist(client, session, fail_ids=()):
    for cp in session["checkpoints"]:
        data = {"status": "Fail" if cp["id"] in fail_ids else "Pass", "image": PHOTO}
        if cp["id"] in fail_ids:
            data["reason"] = "Damaged on arrival."
        resp = client.post_json(f"/api/qc/checkpoints/{cp['id']}/", data)
        assert resp.status_code == 200


def _inspect(client, device_id, fail_ids=()):
    resp = client.post_json("/api/qc/device/", {"device_id": device_id})
    assert resp.status_code == 200, resp.json()
    _fill_checklist(client, resp.json()["session"], fail_ids)
    return client.post_json("/api/qc/submit/")


@pytest.mark.django_db
def test_health(client):
    resp = client.get("/health/")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


@pytest.mark.django_db
def test_session_starts_at_stage_selection(client):
    resp = client.get("/api/qc/session/")
    assert resp.status_code == 200
    assert resp.json()["session"]["step"] == "STAGE_SELECTION"


@pytest.mark.django_db
def test_admin_reaches_console_without_stage(client, seeded_admin):
    resp = _login(client, None, "admin", "123")
    assert resp.status_code == 200
    assert resp.json()["session"]["step"] == "ADMIN"


@pytest.mark.django_db
def test_stage_mismatch_reported_on_login(client, fqc_operator):
    resp = _login(client, "Packaging", "op1", "pass123")

    assert resp.status_code == 400
    body = resp.json()
    assert body["ok"] is False
    assert body["session"]["step"] == "LOGIN"
    assert "assigned to FQC" in body["session"]["error"]


@pytest.mark.django_db
def test_packaging_prerequisite_reported(client, packaging_operator):
    _login(client, "Packaging", "pack1", "pass123")
    resp = client.post_json("/api/qc/device/", {"device_id": "D1"})

    assert resp.status_code == 400
    assert resp.json()["session"]["step"] == "DEVICE_ID_ENTRY"
    assert "D1" in resp.json()["session"]["error"]


@pytest.mark.django_db
def test_incomplete_submit_rejected(client, fqc_operator):
    _login(client, "FQC", "op1", "pass123")
    client.post_json("/api/qc/device/", {"device_id": "D1"})

    resp = client.post_json("/api/qc/submit/")

    assert resp.status_code == 400
    assert resp.json()["session"]["step"] == "CHECKLIST"
    assert QCReport.objects.count() == 0


@pytest.mark.django_db
def test_fqc_then_packaging_end_to_end(client, fqc_operator, packaging_operator):
    _login(client, "FQC", "op1", "pass123")
    resp = _inspect(client, "d1")
    assert resp.status_code == 200
    assert resp.json()["session"]["step"] == "SUCCESS"

    client.post_json("/api/qc/logout/")
    _login(client, "Packaging", "pack1", "pass123")
    resp = _inspect(client, "D1", fail_ids=["box_02"])
    assert resp.status_code == 200

    status = store.get_device_status("D1")
    assert status.fqc_status == "completed"
    assert status.packaging_status == "failed"

    resp = client.post_json("/api/qc/next-device/")
    session = resp.json()["session"]
    assert (session["step"], session["user_id"], session["stage"], session["device_id"]) == (
        "DEVICE_ID_ENTRY",
        "pack1",
        "Packaging",
        "",
    )


@pytest.mark.django_db
def test_checkpoint_photo_upload(client, fqc_operator):
    _login(client, "FQC", "op1", "pass123")
    client.post_json("/api/qc/device/", {"device_id": "D1"})

    buf = io.BytesIO()
    Image.new("RGB", (2, 2)).save(buf, format="PNG")
    upload = SimpleUploadedFile("scr.png", buf.getvalue(), content_type="image/png")

    resp = client.post("/api/qc/checkpoints/scr_01/", {"status": "Pass", "image": upload})

    cp = resp.json()["session"]["checkpoints"][0]
    assert cp["status"] == "Pass"
    assert cp["image"].startswith("data:image/png;base64,")


@pytest.mark.django_db
def test_bad_checkpoint_status_rejected(client, fqc_operator):
    _login(client, "FQC", "op1", "pass123")
    client.post_json("/api/qc/device/", {"device_id": "D1"})

    resp = client.post_json("/api/qc/checkpoints/scr_01/", {"status": "Maybe"})
    assert resp.status_code == 400


@pytest.mark.django_db
def test_non_text_reason_rejected_and_submit_still_answers(client, fqc_operator):
    _login(client, "FQC", "op1", "pass123")
    session = client.post_json("/api/qc/device/", {"device_id": "D9"}).json()["session"]

    for cp in session["checkpoints"]:
        resp = client.post_json(
            f"/api/qc/checkpoints/{cp['id']}/", {"status": "Fail", "image": PHOTO, "reason": 5}
        )
        assert resp.status_code == 400

    resp = client.post_json("/api/qc/submit/")
    assert resp.status_code == 400
    assert resp.json()["session"]["step"] == "CHECKLIST"
    assert QCReport.objects.count() == 0


@pytest.mark.django_db
def test_add_and_remove_checkpoint(client, fqc_operator):
    _login(client, "FQC", "op1", "pass123")
    client.post_json("/api/qc/device/", {"device_id": "D1"})

    session = client.post_json("/api/qc/checkpoints/add/", {"label": "SIM tray"}).json()["session"]
    custom = session["checkpoints"][-1]
    assert custom["id"].startswith("custom_")

    session = client.post_json(f"/api/qc/checkpoints/{custom['id']}/remove/").json()["session"]
    assert [cp["id"] for cp in session["checkpoints"]] == ["scr_01", "bat_02", "btn_03", "chg_04"]


@pytest.mark.django_db
def test_suggest_reason_falls_back_without_service(client, fqc_operator):
    _login(client, "FQC", "op1", "pass123")
    client.post_json("/api/qc/device/", {"device_id": "D1"})

    resp = client.post_json("/api/qc/checkpoints/chg_04/suggest-reason/")

    assert resp.status_code == 200
    assert resp.json()["reason"] == "Unknown defect; further investigation required."
    assert resp.json()["session"]["checkpoints"][3]["reason"] == resp.json()["reason"]


@pytest.mark.django_db
def test_scan_flow(client, fqc_operator):
    _login(client, "FQC", "op1", "pass123")
    assert client.post_json("/api/qc/scan/start/").json()["session"]["step"] == "SCAN_DEVICE_ID"

    resp = client.post_json("/api/qc/scan/decoded/", {"code": "flex-77"})
    session = resp.json()["session"]
    assert (session["step"], session["device_id"]) == ("CHECKLIST", "FLEX-77")


# -----------------------
# Admin console
# -----------------------
@pytest.mark.django_db
def test_admin_endpoints_require_admin_session(client, fqc_operator):
    assert client.get("/api/qc/admin/users/").status_code == 403

    _login(client, "FQC", "op1", "pass123")
    assert client.get("/api/qc/dashboard/").status_code == 403
    assert client.get("/api/qc/export.csv").status_code == 403


@pytest.mark.django_db
def test_admin_user_management(client, seeded_admin):
    _login(client, None, "admin", "123")

    resp = client.post_json("/api/qc/admin/users/", {"user_id": "op5", "password": "5555", "stage": "Packaging"})
    assert resp.status_code == 201

    resp = client.post_json("/api/qc/admin/users/", {"user_id": "op5", "password": "x", "stage": "FQC"})
    assert resp.status_code == 400

    resp = client.get("/api/qc/admin/users/search/", {"q": "OP5", "stage": "Packaging"})
    assert [u["user_id"] for u in resp.json()["results"]] == ["op5"]

    resp = client.get("/api/qc/admin/users/search/", {"q": "op5", "stage": "FQC"})
    assert resp.json()["searched"] is True
    assert resp.json()["results"] == []

    resp = client.post_json("/api/qc/admin/users/op5/", {"password": "6666", "stage": "FQC"})
    assert resp.json()["user"]["assigned_stage"] == "FQC"

    resp = client.post_json("/api/qc/admin/users/op5/toggle/")
    assert resp.json()["user"]["is_active"] is False

    assert client.post_json("/api/qc/admin/users/admin/toggle/").status_code == 400
    assert client.post_json("/api/qc/admin/users/admin/delete/").status_code == 400

    assert client.post_json("/api/qc/admin/users/op5/delete/").status_code == 200
    users = client.get("/api/qc/admin/users/").json()["users"]
    assert [u["user_id"] for u in users] == ["admin"]


@pytest.mark.django_db
def test_dashboard_and_export(client, seeded_admin, report_factory):
    _login(client, None, "admin", "123")

    resp = client.get("/api/qc/export.csv")
    assert resp.status_code == 404

    report_factory(device_id="D1")
    client.post_json("/api/qc/dashboard/open/")

    dashboard = client.get("/api/qc/dashboard/").json()["dashboard"]
    assert dashboard["total_reports"] == 1
    assert dashboard["by_operator"] == {"op1": 1}

    resp = client.get("/api/qc/export.csv")
    assert resp.status_code == 200
    assert resp["Content-Disposition"].startswith('attachment; filename="Flex_QC_Export_')
    assert resp.content.decode().splitlines()[0] == (
        "Report ID,Timestamp,Stage,User ID,Device ID,Checkpoints Summary"
    )


@pytest.mark.django_db
def test_logout_resets_session(client, fqc_operator):
    _login(client, "FQC", "op1", "pass123")
    resp = client.post_json("/api/qc/logout/")
    session = resp.json()["session"]
    assert session["step"] == "STAGE_SELECTION"
    assert session["user_id"] is None
