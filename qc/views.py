# qc/views.py
from __future__ import annotations

import json
import logging
from functools import wraps

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .errors import NoReportsToExport, QCError
from .services import directory, process, workflow
from .services.capture import encode_image
from .services.export import export_filename, render_reports_csv
from .services.metrics import dashboard_summary
from .services.suggestions import suggest_failure_reason
from .store import list_reports

logger = logging.getLogger(__name__)

SESSION_KEY = "qc_session"


# -----------------------
# Helpers
# -----------------------
def _load(request: HttpRequest) -> workflow.SessionContext:
    return workflow.SessionContext.from_dict(request.session.get(SESSION_KEY))


def _save(request: HttpRequest, ctx: workflow.SessionContext) -> None:
    request.session[SESSION_KEY] = ctx.as_dict()


def _payload(request: HttpRequest) -> dict:
    if request.content_type == "application/json":
        try:
            data = json.loads(request.body or b"{}")
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
    return request.POST.dict()


def _respond(request: HttpRequest, ctx: workflow.SessionContext, **extra) -> JsonResponse:
    _save(request, ctx)
    body = {"ok": not ctx.error, "session": ctx.as_dict()}
    body.update(extra)
    return JsonResponse(body, status=400 if ctx.error else 200)


def _error(message: str, status: int = 400) -> JsonResponse:
    return JsonResponse({"ok": False, "error": message}, status=status)


def _transition(request: HttpRequest, fn, *args, **kwargs) -> JsonResponse:
    ctx = workflow.run_transition(_load(request), fn, *args, **kwargs)
    return _respond(request, ctx)


def admin_required(view):
    """Admin endpoints need an admin identity on the admin console or dashboard."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        ctx = _load(request)
        if not ctx.is_admin or ctx.step not in (workflow.ADMIN, workflow.DASHBOARD):
            return _error("Admin access required.", status=403)
        return view(request, *args, **kwargs)

    return wrapper


def _user_json(user) -> dict:
    return {
        "user_id": user.user_id,
        "is_admin": user.is_admin,
        "is_active": user.is_active,
        "assigned_stage": user.assigned_stage or None,
    }


# -----------------------
# Health + session
# -----------------------
def health(request: HttpRequest):
    return JsonResponse({"ok": True, "message": "QC service running"})


@require_GET
@ensure_csrf_cookie
def session_state(request: HttpRequest):
    return _respond(request, _load(request))


# -----------------------
# Stage selection / login
# -----------------------
@require_POST
def select_stage(request: HttpRequest):
    return _transition(request, workflow.select_stage, _payload(request).get("stage"))


@require_POST
def open_admin(request: HttpRequest):
    return _transition(request, workflow.open_admin)


@require_POST
def login(request: HttpRequest):
    data = _payload(request)
    return _transition(request, workflow.login, data.get("user_id", ""), data.get("password", ""))


@require_POST
def logout(request: HttpRequest):
    ctx = workflow.logout(_load(request))
    request.session.flush()
    return _respond(request, ctx)


@require_POST
def back(request: HttpRequest):
    return _transition(request, workflow.back_to_selection)


# -----------------------
# Device identification
# -----------------------
@require_POST
def device_photo(request: HttpRequest):
    image = encode_image(request.FILES.get("image"))
    if image is None:
        image = _payload(request).get("image") or None
    return _transition(request, workflow.set_device_image, image)


@require_POST
def enter_device(request: HttpRequest):
    return _transition(request, workflow.enter_device_id, _payload(request).get("device_id", ""))


@require_POST
def scan_start(request: HttpRequest):
    return _transition(request, workflow.start_scan)


@require_POST
def scan_decoded(request: HttpRequest):
    return _transition(request, workflow.scan_decoded, _payload(request).get("code", ""))


@require_POST
def scan_cancel(request: HttpRequest):
    return _transition(request, workflow.cancel_scan)


# -----------------------
# Checklist
# -----------------------
@require_POST
def checkpoint_add(request: HttpRequest):
    label = _payload(request).get("label") or process.DEFAULT_CUSTOM_LABEL
    return _transition(request, workflow.add_checkpoint, label)


@require_POST
def checkpoint_update(request: HttpRequest, checkpoint_id: str):
    """
    Patch one checkpoint. Accepts status / reason / label fields and an
    optional photo (multipart "image" file or an already-encoded string).
    """
    data = _payload(request)
    changes = {k: data[k] for k in ("status", "reason", "label") if k in data}
    if changes.get("status") == "":
        changes["status"] = None

    photo = request.FILES.get("image")
    if photo is not None:
        encoded = encode_image(photo)
        if encoded is not None:
            changes["image"] = encoded
    elif data.get("image"):
        changes["image"] = data["image"]

    try:
        return _transition(request, workflow.update_checkpoint, checkpoint_id, **changes)
    except ValueError as exc:
        return _error(str(exc))


@require_POST
def checkpoint_remove(request: HttpRequest, checkpoint_id: str):
    return _transition(request, workflow.remove_checkpoint, checkpoint_id)


@require_POST
def checkpoint_suggest_reason(request: HttpRequest, checkpoint_id: str):
    ctx = _load(request)
    if ctx.step != workflow.CHECKLIST:
        return _error("That action is not available on this screen.")
    cp = next((c for c in ctx.checkpoints if c.id == checkpoint_id), None)
    if cp is None:
        return _error(f"Checkpoint {checkpoint_id} not found.", status=404)

    reason = suggest_failure_reason(cp.label, ctx.stage)
    ctx = workflow.run_transition(ctx, workflow.update_checkpoint, checkpoint_id, reason=reason)
    return _respond(request, ctx, reason=reason)


@require_POST
def checklist_leave(request: HttpRequest):
    return _transition(request, workflow.leave_checklist)


@require_POST
def submit(request: HttpRequest):
    return _transition(request, workflow.submit)


@require_POST
def next_device(request: HttpRequest):
    return _transition(request, workflow.next_device)


# -----------------------
# Admin directory
# -----------------------
@require_http_methods(["GET", "POST"])
@admin_required
def users(request: HttpRequest):
    if request.method == "POST":
        data = _payload(request)
        try:
            user = directory.create_user(data.get("user_id"), data.get("password"), data.get("stage"))
        except QCError as exc:
            return _error(exc.message)
        return JsonResponse({"ok": True, "user": _user_json(user)}, status=201)

    return JsonResponse({"ok": True, "users": [_user_json(u) for u in directory.list_users()]})


@require_POST
@admin_required
def user_update(request: HttpRequest, user_id: str):
    data = _payload(request)
    try:
        user = directory.update_user(user_id, data.get("password"), data.get("stage"))
    except QCError as exc:
        return _error(exc.message)
    return JsonResponse({"ok": True, "user": _user_json(user)})


@require_POST
@admin_required
def user_toggle(request: HttpRequest, user_id: str):
    try:
        user = directory.toggle_active(user_id)
    except QCError as exc:
        return _error(exc.message)
    return JsonResponse({"ok": True, "user": _user_json(user)})


@require_POST
@admin_required
def user_delete(request: HttpRequest, user_id: str):
    try:
        directory.delete_user(user_id)
    except QCError as exc:
        return _error(exc.message)
    return JsonResponse({"ok": True})


@require_GET
@admin_required
def user_search(request: HttpRequest):
    q = (request.GET.get("q") or "").strip()
    stage = (request.GET.get("stage") or "").strip()
    found = directory.search_users(q, stage)
    if found is None:
        return JsonResponse({"ok": True, "searched": False, "results": []})
    return JsonResponse({"ok": True, "searched": True, "results": [_user_json(u) for u in found]})


# -----------------------
# Dashboard + export
# -----------------------
@require_POST
def dashboard_open(request: HttpRequest):
    return _transition(request, workflow.open_dashboard)


@require_POST
def dashboard_close(request: HttpRequest):
    return _transition(request, workflow.close_dashboard)


@require_GET
@admin_required
def dashboard(request: HttpRequest):
    return JsonResponse({"ok": True, "dashboard": dashboard_summary()})


@require_GET
@admin_required
def export_csv(request: HttpRequest):
    reports = list_reports()
    try:
        content = render_reports_csv(reports)
    except NoReportsToExport as exc:
        return _error(exc.message, status=404)
    logger.info("Exported %d reports to CSV", len(reports))

    resp = HttpResponse(content, content_type="text/csv; charset=utf-8")
    resp["Content-Disposition"] = f'attachment; filename="{export_filename()}"'
    return resp
