from boutique.domain.model.alert import AdminAlert, AlertType
from boutique.infrastructure import bootstrap
from boutique.infrastructure.bootstrap import Container
from boutique.infrastructure.settings import Settings
from tests.fakes import NOW


class RecordingLogger:

    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def info(self, event: str, **fields) -> None:
        self.events.append((event, fields))


def test_new_alerts_are_logged(tmp_path, monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr(bootstrap, "logger", recorder)
    container = Container(Settings(data_dir=tmp_path))

    container.broadcaster.publish(
        AdminAlert(
            id="f" * 24,
            type=AlertType.ORDER_STALE_STATUS,
            message="Order #01234567 has been pending for 80h.",
            order_id="0" * 24,
            order_status="pending",
            created_at=NOW,
        )
    )

    [(event, fields)] = recorder.events
    assert event == "Admin alert"
    assert fields["alert_type"] == "ORDER_STALE_STATUS"
    assert fields["order_id"] == "0" * 24
    assert fields["alert_message"].startswith("Order #01234567")


def test_empty_store_has_no_sales(tmp_path):
    container = Container(Settings(data_dir=tmp_path))
    assert container.sales_history().handle() == []
