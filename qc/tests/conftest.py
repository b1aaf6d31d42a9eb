# qc/tests/conftest.py

from __future__ import annotations

import json
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

import pytest
from django.test import Client
from django.utils import timezone

from qc import store
from qc.models import STAGE_FQC, STAGE_PACKAGING, DeviceStatus, Operator, QCReport
from qc.services import workflow
from qc.tests.helpers import PHOTO


class JSONClient(Client):
    """Test client that posts JSON bodies by default."""

    def post_json(self, path: str, data: Optional[Dict[str, Any]] = None, **extra):
        return self.post(path, json.dumps(data or {}), content_type="application/json", **extra)


@pytest.fixture
def client() -> JSONClient:
    return JSONClient()


@pytest.fixture
def seeded_admin(db) -> Operator:
    store.ensure_seed_admin()
    return store.get_user("admin")


@pytest.fixture
def operator_factory(db) -> Callable[..., Operator]:
    def _factory(
        user_id: str,
        password: str = "pass123",
        stage: str = STAGE_FQC,
        *,
        is_active: bool = True,
        is_admin: bool = False,
    ) -> Operator:
        store.ensure_seed_admin()
        user = Operator(user_id=user_id, assigned_stage=stage, is_active=is_active, is_admin=is_admin)
        user.set_password(password)
        user.save()
        return user

    return _factory


@pytest.fixture
def fqc_operator(operator_factory) -> Operator:
    return operator_factory("op1", "pass123", STAGE_FQC)


@pytest.fixture
def packaging_operator(operator_factory) -> Operator:
    return operator_factory("pack1", "pass123", STAGE_PACKAGING)


@pytest.fixture
def checklist_ctx(fqc_operator) -> Callable[..., workflow.SessionContext]:
    """Build a session already on the checklist for a given stage/operator/device."""

    def _factory(device_id: str = "D1", stage: str = STAGE_FQC, user_id: str = "op1") -> workflow.SessionContext:
        ctx = workflow.SessionContext()
        ctx = workflow.select_stage(ctx, stage)
        ctx = workflow.login(ctx, user_id, "pass123")
        return workflow.enter_device_id(ctx, device_id)

    return _factory


@pytest.fixture
def report_factory(db) -> Callable[..., QCReport]:
    counter = {"n": 0}

    def _factory(
        *,
        stage: str = STAGE_FQC,
        user_id: str = "op1",
        device_id: str = "D1",
        checkpoints: Optional[List[Dict[str, Any]]] = None,
        timestamp=None,
    ) -> QCReport:
        counter["n"] += 1
        report = QCReport(
            id=f"REP-TEST-{counter['n']}",
            timestamp=timestamp or timezone.now(),
            stage=stage,
            user_id=user_id,
            device_id=device_id,
            checkpoints=checkpoints
            if checkpoints is not None
            else [{"id": "scr_01", "label": "Screen Surface Scratch Test", "status": "Pass", "image": PHOTO, "reason": ""}],
        )
        return store.append_report(report)

    return _factory


@pytest.fixture
def device_status_factory(db) -> Callable[..., DeviceStatus]:
    def _factory(device_id: str, fqc: str = "pending", packaging: str = "pending", age_minutes: int = 0) -> DeviceStatus:
        return DeviceStatus.objects.create(
            device_id=device_id,
            fqc_status=fqc,
            packaging_status=packaging,
            last_updated=timezone.now() - timedelta(minutes=age_minutes),
        )

    return _factory
