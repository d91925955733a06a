"""Tests for the command-line interface."""
import json
from unittest.mock import patch

import pytest

from catmatch.cli import build_matcher, main
from catmatch.config import config


class TestCLI:
    def test_match(self, taxonomy_file, capsys):
        main(["match", "--name", "Men's Oxford Shirt", "--taxonomy", taxonomy_file])
        out = json.loads(capsys.readouterr().out)
        assert out["mainCategory"] == "Fashion"
        assert out["subCategory"] == "Men's Shirts"
        assert out["source"] == "local"

    def test_match_remote_requires_key(self, taxonomy_file, capsys):
        with patch.object(config, "OPENAI_KEY", ""):
            with pytest.raises(SystemExit):
                main(["match", "--name", "Hat", "--taxonomy", taxonomy_file, "--remote"])
        assert "OPENAI_API_KEY" in capsys.readouterr().out

    def test_batch(self, taxonomy_file, tmp_path, capsys):
        rows = tmp_path / "rows.json"
        rows.write_text(json.dumps([
            {"Handle": "ipad", "Title": "Apple iPad Air 5th Gen"},
            {"Handle": "widget", "Title": "Generic Plastic Widget", "Type": "Gadgets"},
        ]))
        output = tmp_path / "out.json"
        main(["batch", "--file", str(rows), "--platform", "shopify",
              "--taxonomy", taxonomy_file, "--output", str(output)])
        assert "Products: 2" in capsys.readouterr().out
        data = json.loads(output.read_text())
        assert data["rows"][0]["mainCategory"] == "Tablets"
        assert data["rows"][1]["subCategory"] == "Gadgets"

    def test_match_record(self, taxonomy_file, capsys):
        with patch("catmatch.history.HistoryStore") as store_cls:
            store = store_cls.return_value
            store.lookup_corrections.return_value = {}
            main(["match", "--name", "Men's Oxford Shirt", "--taxonomy", taxonomy_file, "--record"])
        store.save_mapping.assert_called_once_with(
            "Men's Oxford Shirt", "", "Fashion", "Men's Shirts", 95, False)

    def test_batch_record_skips_review_rows(self, taxonomy_file, tmp_path, capsys):
        rows = tmp_path / "rows.json"
        rows.write_text(json.dumps([
            {"Handle": "ipad", "Title": "Apple iPad Air 5th Gen"},
            {"Handle": "widget", "Title": "Generic Plastic Widget"},
        ]))
        with patch("catmatch.history.HistoryStore") as store_cls:
            store = store_cls.return_value
            store.lookup_corrections.return_value = {}
            store.lookup_similar.return_value = None
            main(["batch", "--file", str(rows), "--platform", "shopify",
                  "--taxonomy", taxonomy_file, "--record"])
        store.save_mapping.assert_called_once()
        assert store.save_mapping.call_args[0][:2] == ("Apple iPad Air 5th Gen", "")

    def test_prompt(self, taxonomy_file, capsys):
        main(["prompt", "--name", "Bucket Hat", "--taxonomy", taxonomy_file])
        out = capsys.readouterr().out
        assert "Title: Bucket Hat" in out
        assert "- Fashion > Hats" in out

    def test_terms(self, capsys):
        main(["terms", "--category", "Tablets"])
        out = capsys.readouterr().out
        assert "ipad" in out
        assert "Tablets > iPad" in out

    def test_empty_taxonomy_exits(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("[]")
        with pytest.raises(SystemExit):
            main(["match", "--name", "Hat", "--taxonomy", str(path)])

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])


class TestBuildMatcher:
    def test_extra_terms_take_precedence(self, tmp_path):
        path = tmp_path / "terms.json"
        path.write_text(json.dumps([{"phrase": "ipad", "category": "Electronics", "weight": 90}]))
        with patch.object(config, "TERM_TABLE_PATH", str(path)):
            matcher = build_matcher()
        assert matcher.term_table.get("ipad").category == "Electronics"
        assert matcher.term_table.get("iphone").category == "Mobile Phones"
