import json
from datetime import timedelta
from unittest.mock import patch

import pytest

from shop_insights.pipelines.insights import InsightsPipeline
from shop_insights.pipelines.notifications import NotificationsPipeline
from shop_insights.schemas import DashboardReport

from conftest import NOW, TODAY


def _iso(dt):
    return dt.isoformat().replace("+00:00", "Z")


@pytest.fixture
def exports(tmp_path):
    input_dir = tmp_path / "input"
    input_dir.mkdir()

    sales = [
        {"id": "1", "itemName": "Milk", "quantity": 20, "price": 28, "date": _iso(NOW - timedelta(days=10))},
        {"id": "2", "itemName": "Milk", "quantity": 2, "price": 28, "date": _iso(NOW - timedelta(days=1))},
        {"id": "3", "itemName": "Bread", "quantity": 3, "price": 40, "date": _iso(NOW - timedelta(hours=2))},
    ]
    stock = [
        {"id": "s1", "itemName": "Milk", "category": "Dairy", "quantity": 4, "price": 28,
         "expiryDate": (TODAY + timedelta(days=2)).isoformat()},
        {"id": "s2", "itemName": "Bread", "category": "Bakery", "quantity": 30, "price": 40},
        {"id": "s3", "itemName": "Ghee", "category": "Dairy", "quantity": 0, "price": 500},
    ]
    expenses = [{"id": "e1", "category": "Rent", "amount": 1500, "date": TODAY.isoformat()}]

    (input_dir / "sales_2025-06-30.json").write_text(json.dumps(sales))
    (input_dir / "stock.json").write_text(json.dumps(stock))
    (input_dir / "expenses.json").write_text(json.dumps(expenses))
    return input_dir


def test_insights_pipeline_end_to_end(exports, tmp_path):
    output_dir = tmp_path / "output"
    pipeline = InsightsPipeline(test_mode=True, input_dir=exports, output_dir=output_dir, now=NOW)

    with patch("shop_insights.data_handler.requests.post") as post:
        report = pipeline.run()
    post.assert_not_called()

    assert isinstance(report, DashboardReport)
    assert report.stats.total_sales == 28 * 22 + 120
    assert report.stats.total_expenses == 1500
    assert [b.name for b in report.insights.best_selling] == ["Milk", "Bread"]
    assert [(f.name, f.drop_percent) for f in report.insights.falling_demand] == [("Milk", "90")]
    assert [(r.item.id, r.suggested) for r in report.insights.suggested_reorders] == [("s1", 23), ("s3", 5)]
    assert [i.id for i in report.insights.slow_moving] == ["s3"]

    assert pipeline.status_summary["sales"].isoformat() == "2025-06-30"
    assert pipeline.status_summary["stock"] is None
    assert pipeline.status_summary["payments"] is None

    assert (output_dir / "insights_report_2025-06-30.json").exists()
    assert (output_dir / "insights_report_2025-06-30.csv").exists()
    saved = json.loads((output_dir / "insights_report_2025-06-30.json").read_text())
    assert saved["insights"]["peakHours"][0] == {"hour": "12:00 - 12:59 PM", "count": 2}
    assert saved["stats"]["pendingPayments"] == 0


def test_insights_pipeline_requires_stock(exports, tmp_path):
    (exports / "stock.json").unlink()
    output_dir = tmp_path / "output"

    report = InsightsPipeline(test_mode=True, input_dir=exports, output_dir=output_dir, now=NOW).run()
    assert report is None
    assert not output_dir.exists()


def test_insights_pipeline_aborts_on_invalid_export(exports, tmp_path):
    (exports / "stock.json").write_text(json.dumps([{"id": "x", "itemName": "Bad", "quantity": "lots"}]))
    report = InsightsPipeline(test_mode=True, input_dir=exports, output_dir=tmp_path / "out", now=NOW).run()
    assert report is None


def test_notifications_pipeline(exports, tmp_path):
    output_dir = tmp_path / "output"
    notifications = NotificationsPipeline(
        test_mode=True, input_dir=exports, output_dir=output_dir, now=NOW
    ).run()

    assert [n.id for n in notifications] == ["low-s1", "expiry-s1", "out-of-stock-s3"]
    saved = json.loads((output_dir / "notifications_report_2025-06-30.json").read_text())
    assert [n["type"] for n in saved] == ["lowStock", "nearExpiry", "outOfStock"]


def test_pipeline_posts_to_webhook_outside_test_mode(exports, tmp_path, monkeypatch):
    from shop_insights import settings

    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://example.test/hook")
    with patch("shop_insights.data_handler.requests.post") as post:
        NotificationsPipeline(input_dir=exports, output_dir=tmp_path / "out", now=NOW).run()

    post.assert_called_once()
    assert post.call_args.kwargs["json"]["reportType"] == "notifications"
