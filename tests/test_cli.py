"""
Tests for the ``monchantier`` command-line interface.
"""

import json

import pytest
import yaml
from monchantier.cli import build_parser, example_dataset, main


def _run(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


@pytest.fixture
def dataset_path(tmp_path):
    path = tmp_path / "chantiers.yaml"
    path.write_text(yaml.safe_dump(example_dataset()), encoding="utf-8")
    return path


class TestExample:
    def test_example_is_valid_json(self, capsys):
        assert _run(["example"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert {c["id"] for c in data["chantiers"]} == {"villa-sousse", "immeuble-lyon"}


class TestSummary:
    """Test the summary command."""

    def test_human_output(self, dataset_path, capsys):
        assert _run(["summary", "-i", str(dataset_path)]) == 0
        out = capsys.readouterr().out
        assert "5 records selected" in out
        assert "Display currency: DNT" in out

    def test_json_output_with_filters(self, dataset_path, capsys):
        code = _run(
            [
                "summary",
                "-i",
                str(dataset_path),
                "--json",
                "--chantier",
                "villa-sousse",
                "--type",
                "expense",
            ]
        )
        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["kpis"]["nb_expenses"] == 2
        assert summary["kpis"]["total_expenses"] == 16200.0
        assert [r["key"] for r in summary["by_chantier"]] == ["villa-sousse"]

    def test_display_currency(self, dataset_path, capsys):
        assert _run(["summary", "-i", str(dataset_path), "--json", "--currency", "eur"]) == 0
        summary = json.loads(capsys.readouterr().out)
        lyon = next(r for r in summary["by_chantier"] if r["key"] == "immeuble-lyon")
        assert summary["display_currency"] == "EUR"
        assert lyon["total"] == 1500.0

    def test_period_preset(self, dataset_path, capsys):
        code = _run(
            [
                "summary",
                "-i",
                str(dataset_path),
                "--json",
                "--period",
                "7d",
                "--today",
                "2025-02-05",
            ]
        )
        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["kpis"]["nb_expenses"] == 1

    def test_output_file(self, dataset_path, tmp_path):
        out = tmp_path / "summary.json"
        assert _run(["summary", "-i", str(dataset_path), "-o", str(out)]) == 0
        assert json.loads(out.read_text())["base_currency"] == "DNT"

    def test_missing_rate_reports_error(self, tmp_path, capsys):
        data = example_dataset()
        data["expenses"][0]["currency"] = "GBP"
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        assert _run(["summary", "-i", str(path)]) == 1
        assert "GBP" in capsys.readouterr().err

    def test_inverted_dates_report_error(self, dataset_path, capsys):
        code = _run(
            ["summary", "-i", str(dataset_path), "--from", "2025-03-01", "--to", "2025-01-01"]
        )
        assert code == 1
        assert "Error building summary" in capsys.readouterr().err


class TestRates:
    """Test the rates command."""

    def test_show_defaults(self, capsys):
        assert _run(["rates", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["rates"] == {"DNT": 1.0, "EUR": 3.35, "USD": 3.1}

    def test_set_and_persist(self, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        assert _run(["rates", "-c", str(config), "--set", "EUR=3.5", "gbp=4"]) == 0
        saved = yaml.safe_load(config.read_text())
        assert saved["rates"]["EUR"] == 3.5
        assert saved["rates"]["GBP"] == 4.0
        assert saved["last_updated"] is not None

    def test_set_requires_config(self, capsys):
        assert _run(["rates", "--set", "EUR=3.5"]) == 1
        assert "--config" in capsys.readouterr().err

    def test_set_rejects_bad_pair(self, tmp_path, capsys):
        assert _run(["rates", "-c", str(tmp_path / "c.yaml"), "--set", "EUR"]) == 1
        assert "CUR=RATE" in capsys.readouterr().err


class TestValidate:
    def test_valid_dataset(self, dataset_path, capsys):
        assert _run(["validate", "-i", str(dataset_path)]) == 0
        assert "Validation passed" in capsys.readouterr().out

    def test_json_report_with_warnings(self, tmp_path, capsys):
        data = example_dataset()
        data["expenses"][0]["category_id"] = "plomberie"
        path = tmp_path / "data.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")

        assert _run(["validate", "-i", str(path), "--format", "json"]) == 2
        report = json.loads(capsys.readouterr().out)
        assert report["unresolved_categories"] == ["plomberie"]


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
