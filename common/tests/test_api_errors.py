import json
import logging

import pytest
from common.exceptions import GENERIC_ERROR_DETAIL, InsufficientStock, api_exception_handler
from config.logging import JsonFormatter, SamplingFilter
from rest_framework.exceptions import NotAuthenticated
from rest_framework.test import APIClient


def test_domain_error_rendering():
    resp = api_exception_handler(InsufficientStock("Only 2 left."), {})
    assert resp.status_code == 409
    assert resp.data == {"detail": "Only 2 left.", "code": "insufficient_stock"}


def test_drf_errors_keep_default_shape():
    resp = api_exception_handler(NotAuthenticated(), {})
    assert resp.status_code == 401
    assert "detail" in resp.data


def test_unexpected_errors_are_hidden(caplog):
    with caplog.at_level(logging.ERROR, logger="pos.errors"):
        resp = api_exception_handler(RuntimeError("db password is hunter2"), {"view": None})
    assert resp.status_code == 500
    assert resp.data == {"detail": GENERIC_ERROR_DETAIL, "code": "server_error"}
    assert "hunter2" not in json.dumps(resp.data)
    assert any(r.getMessage() == "api.unhandled_error" for r in caplog.records)


@pytest.mark.django_db
def test_health_endpoint_is_public():
    resp = APIClient().get("/health/")
    assert resp.status_code == 200
    assert resp.data["status"] == "ok"


def _record(msg, level=logging.INFO, **extra):
    record = logging.LogRecord("pos.sales", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_merges_extras():
    line = JsonFormatter().format(_record("sale.placed", event="sale.placed", sale_id=7, total="6.00"))
    payload = json.loads(line)
    assert payload["message"] == "sale.placed"
    assert payload["sale_id"] == 7
    assert payload["level"] == "INFO"
    assert payload["time"].endswith("Z")


def test_sampling_filter_never_drops_allowed_events():
    sampler = SamplingFilter(rate=0.0, levels=["INFO"], allow_events=["sale.placed"])
    assert sampler.filter(_record("sale.placed")) is True
    assert sampler.filter(_record("stock.movement_applied")) is False
    assert sampler.filter(_record("stock.movement_applied", level=logging.WARNING)) is True
