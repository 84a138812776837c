"""
Тесты для фасада WordFrequencyEngine.
"""

import json
import math
import textwrap
from unittest.mock import patch

import pytest

from frequency_analyser.components.jobs import BackgroundJobRunner, InlineJobRunner
from frequency_analyser.components.search_matcher import SearchMatcher
from frequency_analyser.config import Config
from frequency_analyser.engine import WordFrequencyEngine
from frequency_analyser.errors import (
    AnalysisInProgressError,
    AnalysisTimeoutError,
    NotFoundError,
    ProcessingError,
    UnsupportedFormatError,
    ValidationError,
)
from frequency_analyser.interfaces.engine import Document, SearchMode, SearchQuery


class CountingRunner(InlineJobRunner):
    """Синхронный раннер, считающий отправленные задачи."""

    def __init__(self):
        self.submitted = 0

    def submit(self, job, token=None):
        self.submitted += 1
        return super().submit(job, token)


class TestAggregationLifecycle:
    """Тесты агрегации и кэша карты частот."""

    def test_scenario_corpus(self, scenario_engine):
        entries = scenario_engine.analyze_all()
        words = {e.word: e.frequency for e in entries}
        assert "the" not in words
        assert words["dog"] == 2
        assert scenario_engine.is_initialized is True
        assert scenario_engine.last_refreshed is not None

    def test_clear_cache_reruns_job(self, scenario_corpus, inline_config):
        runner = CountingRunner()
        engine = WordFrequencyEngine(scenario_corpus, cfg=inline_config, runner=runner)

        first = engine.analyze_all()
        second = engine.analyze_all()
        assert first == second
        assert runner.submitted == 1

        engine.clear_cache()
        assert engine.is_initialized is False
        assert engine.last_refreshed is None

        assert engine.analyze_all() == first
        assert runner.submitted == 2

    def test_refresh_forces_rerun(self, scenario_corpus, inline_config):
        runner = CountingRunner()
        engine = WordFrequencyEngine(scenario_corpus, cfg=inline_config, runner=runner)
        engine.analyze_all()
        engine.refresh()
        assert runner.submitted == 2

    def test_progress_events(self, sample_engine):
        events = []
        sample_engine.analyze_all(on_progress=events.append)
        assert events[0].percent == 0.0
        assert events[-1].percent == 100.0
        assert events[-1].processed == 5

    def test_single_flight(self, scenario_engine):
        with scenario_engine._run_lock:
            with pytest.raises(AnalysisInProgressError):
                scenario_engine.analyze_all()

    def test_failure_keeps_previous_state(self, scenario_engine):
        entries = scenario_engine.analyze_all()

        with patch.object(scenario_engine.aggregator, "analyze_all", side_effect=RuntimeError("boom")):
            with pytest.raises(ProcessingError) as exc_info:
                scenario_engine.refresh()
        assert isinstance(exc_info.value.__cause__, RuntimeError)

        assert scenario_engine.is_initialized is True
        assert scenario_engine.analyze_all() == entries
        assert scenario_engine.search("dog", mode="exact")[0].frequency == 2

    def test_domain_errors_pass_through(self, scenario_engine):
        with patch.object(scenario_engine.aggregator, "analyze_all",
                          side_effect=AnalysisTimeoutError("too slow")):
            with pytest.raises(AnalysisTimeoutError):
                scenario_engine.analyze_all()
        assert scenario_engine.is_initialized is False

    def test_background_runner(self, sample_corpus, inline_config):
        with WordFrequencyEngine(sample_corpus, cfg=inline_config, runner=InlineJobRunner()) as engine:
            inline_entries = engine.analyze_all()
        with WordFrequencyEngine(sample_corpus, cfg=inline_config, runner=BackgroundJobRunner()) as engine:
            assert engine.analyze_all() == inline_entries

    def test_close_shuts_down_runner(self, scenario_corpus, inline_config):
        runner = InlineJobRunner()
        with patch.object(runner, "shutdown") as shutdown:
            with WordFrequencyEngine(scenario_corpus, cfg=inline_config, runner=runner):
                pass
        shutdown.assert_called_once()

    def test_duplicate_document_ids_rejected(self, inline_config):
        corpus = [
            Document(id="1", title="A", content="Solar panels."),
            Document(id="1", title="B", content="Solar solar power."),
        ]
        with pytest.raises(ValidationError, match="1"):
            WordFrequencyEngine(corpus, cfg=inline_config)

    def test_optimize_from_config(self, scenario_corpus, tmp_path):
        cfg_path = tmp_path / "optimize.yaml"
        cfg_path.write_text(textwrap.dedent(
            """
            aggregation:
              execution: inline
              yield_interval: 0
              optimize: true
            """
        ).strip(), encoding="utf-8")
        cfg = Config(config_path=str(cfg_path), configure_logging=False)

        with WordFrequencyEngine(scenario_corpus, cfg=cfg) as engine:
            assert [e.word for e in engine.analyze_all()] == ["dog"]


class TestSearchAndAnalysis:
    """Тесты поиска и анализа через фасад."""

    def test_search_with_query_object(self, scenario_engine):
        results = scenario_engine.search(SearchQuery(query="dog", mode=SearchMode.EXACT))
        assert results[0].frequency == 2
        assert len(results[0].contexts) == 2

    def test_search_initializes_lazily(self, scenario_engine):
        assert scenario_engine.is_initialized is False
        scenario_engine.search("jump*", mode="exact")
        assert scenario_engine.is_initialized is True

    def test_search_empty_query(self, scenario_engine):
        with pytest.raises(ValidationError):
            scenario_engine.search("  ")
        assert scenario_engine.is_initialized is False

    def test_search_unknown_mode(self, scenario_engine):
        with pytest.raises(ValidationError, match="fuzzy"):
            scenario_engine.search("dog", mode="fuzzy")
        with pytest.raises(ValidationError, match="fuzzy"):
            scenario_engine.search(SearchQuery(query="dog", mode="fuzzy"))
        assert scenario_engine.is_initialized is False

    def test_search_internal_failure(self, scenario_engine):
        with patch.object(SearchMatcher, "search", side_effect=KeyError("index")):
            with pytest.raises(ProcessingError):
                scenario_engine.search("dog")

    def test_analyze(self, sample_engine):
        analysis = sample_engine.analyze("communication")
        assert analysis.word == "communication"
        assert analysis.part_of_speech == "noun"
        assert sample_engine.get_cached_analysis("communication") is analysis

    def test_analyze_not_found(self, sample_engine):
        with pytest.raises(NotFoundError):
            sample_engine.analyze("zzzz")

    def test_refresh_clears_analyses(self, scenario_engine):
        scenario_engine.analyze("dog")
        scenario_engine.refresh()
        assert scenario_engine.get_cached_analysis("dog") is None

    def test_clear_cache_clears_analyses(self, scenario_engine):
        scenario_engine.analyze("dog")
        scenario_engine.clear_cache()
        assert scenario_engine.get_cached_analysis("dog") is None

    def test_get_cached_analysis_before_init(self, scenario_engine):
        assert scenario_engine.get_cached_analysis("dog") is None


class TestStatisticsAndExport:
    """Тесты статистики, экспорта и дополнительных выборок."""

    def test_statistics(self, scenario_engine):
        stats = scenario_engine.statistics()
        assert stats.total_words == 8
        assert stats.unique_words == 7
        assert stats.articles_analyzed == 1
        assert stats.max_frequency == 2

    def test_export_csv(self, scenario_engine, tmp_path):
        path = scenario_engine.export("csv", tmp_path / "words.csv")
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[1] == '"dog","2","1","dog"'

    def test_export_json_default_folder(self, scenario_engine, tmp_path):
        path = scenario_engine.export("json")
        assert path.parent == tmp_path / "results"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["statistics"]["articlesAnalyzed"] == 1

    def test_export_pdf(self, scenario_engine):
        with pytest.raises(UnsupportedFormatError):
            scenario_engine.export("pdf")

    def test_extra_queries(self, scenario_engine):
        assert scenario_engine.suggestions("la") == ["lazy"]
        assert [e.word for e in scenario_engine.similar_words("dogs")] == ["dog"]
        assert [e.word for e in scenario_engine.words_by_pattern("^b")] == ["brown", "barks"]
        assert [e.word for e in scenario_engine.words_by_frequency_range(2)] == ["dog"]
        assert len(scenario_engine.words_by_article_count(1)) == 7

        distribution = {d["range"]: d["count"] for d in scenario_engine.frequency_distribution()}
        assert distribution["1"] == 6
        assert distribution["2-5"] == 1

    def test_collocations_and_ngrams(self, scenario_engine):
        collocations = scenario_engine.collocations("dog")
        assert {c["word"] for c in collocations} == {"quick", "brown", "fox", "jumps", "lazy", "barks"}
        assert scenario_engine.ngrams(2) == []

    def test_keywords(self, scenario_engine):
        keywords = scenario_engine.keywords()
        assert [k["word"] for k in keywords] == ["dog"]
        assert keywords[0]["score"] == pytest.approx(2 / 8 * (math.log(4) + 0.3))

    def test_word_density(self, scenario_engine):
        assert scenario_engine.word_density("dog") == pytest.approx(2 / 12)

    def test_complexity(self, scenario_engine):
        document = scenario_engine.complexity("1")
        assert document["sentence_count"] == 2
        assert document["word_count"] == 8
        assert scenario_engine.complexity() == document

    def test_complexity_unknown_document(self, scenario_engine):
        with pytest.raises(NotFoundError):
            scenario_engine.complexity("42")
