from fastapi.testclient import TestClient

from main import create_app
from services.metrics import increment_dispatch, render_prometheus


def test_render_prometheus_empty():
    assert render_prometheus() == ""


def test_metrics_endpoint_renders_counters():
    increment_dispatch("execute", "BANK", "SUCCESS")
    increment_dispatch("execute", "BANK", "SUCCESS")

    r = TestClient(create_app()).get("/metrics")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert "# TYPE bridge_dispatch_total counter" in r.text
    assert 'bridge_dispatch_total{method="BANK",phase="execute",status="SUCCESS"} 2' in r.text
