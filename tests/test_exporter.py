"""
Тесты для компонента ResultExporter.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from frequency_analyser.components.exporter import ResultExporter
from frequency_analyser.components.frequency_aggregator import FrequencyAggregator
from frequency_analyser.errors import ProcessingError, UnsupportedFormatError
from frequency_analyser.interfaces.engine import WordEntry


@pytest.fixture
def entries():
    return [
        WordEntry(word="dog", frequency=2, articles=("1", "3"), stemmed="dog"),
        WordEntry(word="jumps", frequency=1, articles=("1",), stemmed="jump"),
    ]


@pytest.fixture
def exporter(tmp_path):
    return ResultExporter(output_dir=tmp_path / "results")


class TestSerialization:
    """Тесты сериализации в текст."""

    def test_to_csv(self, exporter, entries):
        lines = exporter.to_csv(entries).splitlines()
        assert lines[0] == '"word","frequency","articles","stemmed"'
        assert lines[1] == '"dog","2","1;3","dog"'
        assert lines[2] == '"jumps","1","1","jump"'

    def test_to_csv_empty(self, exporter):
        assert exporter.to_csv([]).strip() == '"word","frequency","articles","stemmed"'

    def test_to_json(self, exporter, entries):
        statistics = FrequencyAggregator.calculate_statistics(entries, articles_analyzed=3)
        data = json.loads(exporter.to_json(entries, statistics))

        assert "exportedAt" in data
        assert data["statistics"]["totalWords"] == 3
        assert data["statistics"]["articlesAnalyzed"] == 3
        assert data["words"][0] == {"word": "dog", "frequency": 2, "articles": ["1", "3"], "stemmed": "dog"}

    def test_to_json_word_limit(self, exporter):
        many = [WordEntry(word=f"w{i}", frequency=1, articles=("1",), stemmed=f"w{i}") for i in range(150)]
        statistics = FrequencyAggregator.calculate_statistics(many)
        data = json.loads(exporter.to_json(many, statistics))
        assert len(data["words"]) == 100
        assert data["statistics"]["uniqueWords"] == 150


class TestExport:
    """Тесты записи файлов."""

    def test_export_csv(self, exporter, entries, tmp_path):
        path = exporter.export(entries, "csv", tmp_path / "out" / "words.csv")
        assert path.exists()
        assert path.read_text(encoding="utf-8") == exporter.to_csv(entries)

    def test_export_json_default_path(self, exporter, entries, tmp_path):
        path = exporter.export(entries, "json")
        assert path.parent == tmp_path / "results"
        assert path.name.startswith("word-frequency-analysis_")
        assert path.suffix == ".json"
        assert json.loads(path.read_text(encoding="utf-8"))["statistics"]["uniqueWords"] == 2

    def test_export_xlsx(self, exporter, entries, tmp_path):
        path = exporter.export(entries, "xlsx", tmp_path / "words.xlsx")
        sheets = pd.read_excel(path, sheet_name=None)
        assert set(sheets) == {"Word Frequency", "Statistics"}
        words = sheets["Word Frequency"]
        assert list(words.columns) == ["word", "frequency", "articles", "stemmed"]
        assert words["word"].tolist() == ["dog", "jumps"]

    def test_export_xlsx_adds_suffix(self, exporter, entries, tmp_path):
        path = exporter.export(entries, "xlsx", tmp_path / "words")
        assert path.suffix == ".xlsx"
        assert path.exists()

    def test_export_all_formats(self, exporter, entries):
        exported = exporter.export_all_formats(entries)
        assert set(exported) == {"csv", "json", "xlsx"}
        assert all(p.exists() for p in exported.values())

    def test_pdf_not_supported(self, exporter, entries):
        with pytest.raises(UnsupportedFormatError, match="PDF"):
            exporter.export(entries, "pdf")

    def test_unknown_format(self, exporter, entries):
        with pytest.raises(UnsupportedFormatError):
            exporter.export(entries, "docx")

    def test_format_case_insensitive(self, exporter, entries, tmp_path):
        assert exporter.export(entries, ".CSV", tmp_path / "upper.csv").exists()

    def test_write_error(self, exporter, entries, tmp_path):
        with patch.object(Path, "write_text", side_effect=OSError("disk full")):
            with pytest.raises(ProcessingError) as exc_info:
                exporter.export(entries, "csv", tmp_path / "words.csv")
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_supported_formats(self):
        assert ResultExporter.supported_formats() == ["csv", "json", "xlsx"]
