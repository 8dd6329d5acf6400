"""Tests for the billing report command (scripts/billing_report.py)."""

import json

import pytest
from openpyxl import load_workbook

from scripts.billing_report import main


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch):
    monkeypatch.delenv("BILLING_CONFIG", raising=False)


class TestBillingReport:
    def test_table_output(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir)]) == 0
        out = capsys.readouterr().out
        assert "Acme" in out
        assert "Globex Ltda" in out
        assert "$ 3.100.000" in out

    def test_json_with_filters(self, data_dir, capsys):
        code = main([
            "--data-dir", str(data_dir),
            "--format", "json",
            "--status", "paid",
        ])
        assert code == 0
        groups = json.loads(capsys.readouterr().out)
        assert [g["client_name"] for g in groups] == ["Acme"]
        assert [i["name"] for i in groups[0]["items"]] == ["Portal clientes"]
        assert groups[0]["items"][0]["payment_status"] == "paid"

    def test_search_and_type(self, data_dir, capsys):
        main(["--data-dir", str(data_dir), "--format", "json",
              "--type", "contract", "--search", "globex"])
        groups = json.loads(capsys.readouterr().out)
        assert [i["name"] for g in groups for i in g["items"]] == ["CT-002"]

    def test_xlsx_output(self, data_dir, tmp_path):
        output = tmp_path / "billing.xlsx"
        assert main(["--data-dir", str(data_dir), "--format", "xlsx",
                     "--output", str(output)]) == 0
        assert "Facturacion" in load_workbook(output).sheetnames

    def test_xlsx_requires_output(self, data_dir, capsys):
        assert main(["--data-dir", str(data_dir), "--format", "xlsx"]) == 1
        assert "--output" in capsys.readouterr().err

    def test_config_file(self, data_dir, tmp_path, capsys):
        config = tmp_path / "billing.yaml"
        config.write_text("unknown_client_label: Sin cliente\nlog_level: ERROR\n")
        (data_dir / "clients.json").write_text("[]", encoding="utf-8")
        assert main(["--data-dir", str(data_dir), "--config", str(config),
                     "--format", "json"]) == 0
        names = [g["client_name"] for g in json.loads(capsys.readouterr().out)]
        assert "Sin cliente" in names

    def test_store_error_exit_code(self, data_dir, capsys):
        (data_dir / "payments.json").write_text("{broken", encoding="utf-8")
        assert main(["--data-dir", str(data_dir)]) == 1
        assert "ERROR" in capsys.readouterr().err

    def test_invalid_config_exit_code(self, data_dir, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text("amount_ceiling: -1\n")
        assert main(["--data-dir", str(data_dir), "--config", str(config)]) == 1
