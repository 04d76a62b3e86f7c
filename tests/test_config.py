from __future__ import annotations

import pytest

from config import get_settings_module
from config.config import db_config_from_env, scheduling_from_env

from src.staff_scheduling.staff_scheduling.approvals.policy import RoleApprovalPolicy
from src.staff_scheduling.staff_scheduling.container import build_container
from src.staff_scheduling.staff_scheduling.core.enums import Role


@pytest.mark.parametrize(
    "env, module",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == module


def test_db_config_reads_environment(monkeypatch):
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_PORT", "3307")
    monkeypatch.delenv("DB_PASSWORD", raising=False)

    cfg = db_config_from_env(default_password="pw")
    assert cfg["host"] == "db.internal"
    assert cfg["port"] == 3307
    assert cfg["password"] == "pw"


def test_scheduling_settings(monkeypatch):
    monkeypatch.setenv("SCHEDULING_ADVANCE_DAYS", "21")
    monkeypatch.setenv("SCHEDULING_BLOCK_CONFLICTS", "0")
    assert scheduling_from_env() == {"default_advance_days": 21, "block_conflicting_shifts": False}


def test_container_wires_services_without_connecting():
    container = build_container(
        db_config={"host": "localhost", "database": "staff_scheduling_test"},
        policy=RoleApprovalPolicy({1: Role.MANAGER}.get),
        scheduling={"default_advance_days": 5},
    )
    assert container.conn.config.database == "staff_scheduling_test"
    assert container.template_service._default_advance_days == 5
    assert container.shift_service._uow is container.uow
    assert container.approval_service._uow is container.uow
