import json
from decimal import Decimal

import pytest

import main
from cli_interface import SplitSlipCLI
from data_models import ProcessingMetrics, Receipt


RECEIPT_TEXT = "\n".join([
    "CORNER GROCER",
    "05/10/2025",
    "Bananas",
    "0.312 kg NET @ $3.906/kg 1.22",
    "Milk 2% 3.49",
    "Coffee beans",
    "$12.00",
])


@pytest.fixture
def receipt_file(tmp_path):
    path = tmp_path / "receipt.txt"
    path.write_text(RECEIPT_TEXT, encoding="utf-8")
    return str(path)


@pytest.fixture
def cli(receipt_file, capsys):
    cli = SplitSlipCLI()
    cli.load_text(receipt_file)
    capsys.readouterr()
    return cli


def _answers(monkeypatch, *answers):
    replies = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(replies))


def test_load_text_makes_parsed_receipt_active(cli):
    receipt = cli.receipt

    assert [item.price for item in receipt.items] == [Decimal("1.22"), Decimal("3.49"), Decimal("12.00")]
    assert receipt.date == "05/10/2025"
    assert receipt.session_id == cli.store.session_id


def test_summary_splits_assigned_items(cli, monkeypatch, capsys):
    alice = cli.store.add_person("Alice")
    bob = cli.store.add_person("Bob")
    bananas, milk, coffee = cli.receipt.items
    cli.store.assign_payer(bananas.id, alice.id)
    cli.store.assign_payer(milk.id, bob.id)
    cli.store.set_payers(coffee.id, [alice.id, bob.id])

    allocation = cli.calculate_summary()

    totals = {pt.person_name: pt.total for pt in allocation.person_totals}
    assert totals == {"Alice": Decimal("7.22"), "Bob": Decimal("9.49")}
    out = capsys.readouterr().out
    assert "$16.71" in out
    assert "not assigned" not in out


def test_summary_can_hand_leftovers_to_everyone(cli, monkeypatch, capsys):
    cli.store.add_person("Alice")
    cli.store.add_person("Bob")
    _answers(monkeypatch, "y")

    allocation = cli.calculate_summary()

    assert allocation.unassigned_amount == Decimal("0.00")
    assert all(len(item.payers) == 2 for item in cli.receipt.items)


def test_summary_warns_about_unassigned_amount(cli, monkeypatch, capsys):
    cli.store.add_person("Alice")
    _answers(monkeypatch, "n")

    allocation = cli.calculate_summary()

    assert allocation.unassigned_amount == Decimal("16.71")
    assert "$16.71 of the bill is not assigned" in capsys.readouterr().out


def test_add_item_starts_receipt_when_none(monkeypatch, capsys):
    cli = SplitSlipCLI()
    _answers(monkeypatch, "Pizza", "18.50", "")

    cli.add_item()

    assert isinstance(cli.receipt, Receipt)
    assert [(item.name, item.price) for item in cli.receipt.items] == [("Pizza", Decimal("18.50"))]


def test_run_reports_validation_errors_and_keeps_going(monkeypatch, capsys):
    cli = SplitSlipCLI()
    _answers(monkeypatch, "4", "Pizza", "lots", "", "8")

    cli.run()

    out = capsys.readouterr().out
    assert "Invalid price" in out
    assert cli.receipt.items == []


def test_export_results(cli, tmp_path):
    alice = cli.store.add_person("Alice")
    for item in cli.receipt.items:
        cli.store.assign_payer(item.id, alice.id)

    filename = cli.export_results(str(tmp_path / "out.json"))

    with open(filename, encoding="utf-8") as f:
        data = json.load(f)
    assert data["people"] == [{"id": alice.id, "name": "Alice"}]
    assert data["receipt"]["date"] == "05/10/2025"
    assert [item["price"] for item in data["receipt"]["items"]] == ["1.22", "3.49", "12.00"]
    assert data["receipt"]["items"][0]["payers"] == [alice.id]
    assert data["summary"]["grand_total"] == "16.71"
    assert data["summary"]["person_totals"][0]["total"] == "16.71"


def test_export_without_receipt():
    data = SplitSlipCLI().build_export()

    assert data["receipt"] is None
    assert "summary" not in data


def test_main_quick_text_mode(receipt_file, capsys):
    main.main(["--quick", "--text", receipt_file])

    out = capsys.readouterr().out
    assert "Found 3 items" in out
    assert "Coffee beans" in out
    assert "$16.71" in out
    assert "05/10/2025" in out


def test_main_quick_mode_needs_existing_image(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        main.main(["--quick", str(tmp_path / "missing.jpg")])

    assert exc_info.value.code == 1


def test_menu_scan_uses_requested_worker_count(tmp_path, monkeypatch, capsys):
    created = []

    class FakeProcessor:
        def __init__(self, num_workers):
            created.append(num_workers)
            self.metrics = ProcessingMetrics(workers_used=num_workers)

        def recognize_text(self, image_path):
            return "Milk 2% 3.49"

    image = tmp_path / "receipt.png"
    image.write_bytes(b"\x89PNG")
    monkeypatch.setattr("cli_interface.ParallelOCRProcessor", FakeProcessor)
    _answers(monkeypatch, "1", str(image), "8")

    main.main(["--workers", "3"])

    assert created == [3]
    assert "Milk 2%" in capsys.readouterr().out
