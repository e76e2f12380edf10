"""
Tests for continuity/cli.py -- the command-line entry point.
"""

import json

from continuity.cli import EXIT_BAD_INPUT, EXIT_OK, build_parser, main


class TestParser:
    """Argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["backup.json"])
        assert args.backup == "backup.json"
        assert args.output is None
        assert args.parallel is False
        assert args.sort is False
        assert args.verbose is False


class TestMain:
    """End-to-end runs of main()."""

    def test_prints_report(self, backup_file, tmp_path, capsys):
        code = main([str(backup_file), "--settings", str(tmp_path / "none.json")])
        assert code == EXIT_OK
        out = capsys.readouterr().out
        assert "Found 3 potential issues" in out
        assert "Character: Alice" in out
        assert "Item: Silver watch" in out

    def test_writes_json_report(self, backup_file, tmp_path):
        output = tmp_path / "reports" / "report.json"
        code = main([
            str(backup_file), "--output", str(output),
            "--settings", str(tmp_path / "none.json"), "--parallel", "--sort",
        ])
        assert code == EXIT_OK
        with open(str(output), "r", encoding="utf-8") as fh:
            data = json.load(fh)
        assert data["success"] is True
        assert data["summary"]["total"] == 3
        assert data["summary"]["byType"] == {
            "multiple_outfits": 1,
            "item_conflict": 1,
            "missing_data": 1,
        }

    def test_bad_backup_exits_2(self, tmp_path):
        code = main([str(tmp_path / "missing.json"), "--settings", str(tmp_path / "none.json")])
        assert code == EXIT_BAD_INPUT

    def test_timeline_row_without_id_exits_2(self, tmp_path, caplog):
        backup = tmp_path / "backup.json"
        backup.write_text(
            json.dumps({"timeline": [{"characterId": "c1", "chapter": 1}]}),
            encoding="utf-8",
        )
        code = main([str(backup), "--settings", str(tmp_path / "none.json")])
        assert code == EXIT_BAD_INPUT
        assert "has no id" in caplog.text

    def test_bad_settings_exits_2(self, backup_file, tmp_path):
        settings = tmp_path / "settings.json"
        settings.write_text('{"max_workers": -1}', encoding="utf-8")
        code = main([str(backup_file), "--settings", str(settings)])
        assert code == EXIT_BAD_INPUT
