"""
Тесты загрузки корпуса.
"""

import json

import pandas as pd
import pytest

from frequency_analyser.corpus import SAMPLE_CORPUS, document_from_dict, load_corpus
from frequency_analyser.errors import ValidationError
from frequency_analyser.interfaces.engine import Document


RECORDS = [
    {"id": 1, "title": "Solar", "content": "Solar energy is clean.", "category": "Environment"},
    {"id": 2, "title": "Wind", "content": "Wind energy is cheap."},
]


class TestDocumentFromDict:

    def test_converts_id_to_string(self):
        document = document_from_dict(RECORDS[0])
        assert document == Document(id="1", title="Solar", content="Solar energy is clean.",
                                    category="Environment")

    def test_optional_fields(self):
        document = document_from_dict({"id": "x", "content": "text"})
        assert document.title == ""
        assert document.category == ""

    def test_missing_required_field(self):
        with pytest.raises(ValidationError, match="content"):
            document_from_dict({"id": "1", "title": "No content"})


class TestLoadCorpus:
    """Тесты чтения файлов корпуса."""

    def test_json_list(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps(RECORDS), encoding="utf-8")

        documents = load_corpus(path)
        assert [d.id for d in documents] == ["1", "2"]
        assert documents[1].category == ""

    def test_json_documents_key(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps({"documents": RECORDS}), encoding="utf-8")
        assert len(load_corpus(str(path))) == 2

    def test_json_wrong_structure(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps("just text"), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_corpus(path)

    def test_json_broken(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_corpus(path)

    def test_csv(self, tmp_path):
        path = tmp_path / "corpus.csv"
        pd.DataFrame(RECORDS).to_csv(path, index=False)

        documents = load_corpus(path)
        assert [d.id for d in documents] == ["1", "2"]
        assert documents[0].content == "Solar energy is clean."
        assert documents[1].category == ""

    def test_xlsx(self, tmp_path):
        path = tmp_path / "corpus.xlsx"
        pd.DataFrame(RECORDS).to_excel(path, index=False)

        documents = load_corpus(path)
        assert [d.id for d in documents] == ["1", "2"]
        assert documents[0].title == "Solar"
        assert documents[1].category == ""

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError):
            load_corpus(tmp_path / "missing.json")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "corpus.txt"
        path.write_text("plain", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_corpus(path)


class TestSampleCorpus:

    def test_sample_corpus(self):
        assert [d.id for d in SAMPLE_CORPUS] == ["1", "2", "3", "4", "5"]
        assert all(d.title and d.content and d.category for d in SAMPLE_CORPUS)
