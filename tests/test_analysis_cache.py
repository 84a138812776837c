"""
Тесты для компонента AnalysisCache.
"""

import pytest

from frequency_analyser.components.analysis_cache import AnalysisCache
from frequency_analyser.components.frequency_aggregator import FrequencyAggregator
from frequency_analyser.components.search_matcher import SearchMatcher
from frequency_analyser.errors import NotFoundError, ValidationError


def build_cache(corpus, **kwargs) -> AnalysisCache:
    entries = FrequencyAggregator(yield_interval=0).analyze_all(corpus)
    return AnalysisCache(SearchMatcher(entries, corpus), **kwargs)


@pytest.fixture
def cache(sample_corpus):
    return build_cache(sample_corpus)


class TestAnalyze:
    """Тесты построения анализа."""

    def test_known_word(self, cache):
        analysis = cache.analyze("energy")

        assert analysis.word == "energy"
        assert analysis.frequency == 3
        assert len(analysis.articles) == 1
        occurrence = analysis.articles[0]
        assert occurrence.article_id == "2"
        assert occurrence.title == "Sustainable Energy Solutions"
        assert occurrence.count == 3
        assert occurrence.category == "Environment"

        assert analysis.definition.startswith("Power derived")
        assert analysis.synonyms == ("power", "force", "strength")
        assert analysis.part_of_speech == "noun"

    def test_contexts(self, cache):
        analysis = cache.analyze("energy")
        assert 0 < len(analysis.contexts) <= 3
        for context in analysis.contexts:
            assert "energy" in context.text.lower()
            assert context.article_id == "2"
            assert context.article_title == "Sustainable Energy Solutions"

    def test_unknown_lexicon_word(self, cache):
        analysis = cache.analyze("solar")
        assert analysis.definition == 'Definition for "solar" - a word used in various contexts.'
        assert analysis.synonyms == ()
        assert analysis.part_of_speech == "noun"

    def test_not_found(self, cache):
        with pytest.raises(NotFoundError):
            cache.analyze("zzzz")
        assert len(cache) == 0

    def test_empty_word(self, cache):
        for word in ("", "   "):
            with pytest.raises(ValidationError):
                cache.analyze(word)

    def test_prefers_exact_entry(self, cache):
        """При нескольких совпадениях берётся запись самого слова."""
        assert cache.analyze("learn").word == "learn"
        assert cache.analyze("learning").word == "learning"


class TestCaching:
    """Тесты кэширования."""

    def test_same_object_returned(self, cache):
        first = cache.analyze("energy")
        assert cache.analyze("energy") is first
        assert cache.analyze("ENERGY ") is first
        assert len(cache) == 1
        assert "Energy" in cache

    def test_get_cached(self, cache):
        assert cache.get_cached("energy") is None
        analysis = cache.analyze("energy")
        assert cache.get_cached("ENERGY") is analysis

    def test_clear(self, cache):
        cache.analyze("energy")
        cache.clear()
        assert len(cache) == 0
        assert cache.get_cached("energy") is None

    def test_reset_switches_matcher(self, cache, scenario_corpus):
        cache.analyze("energy")
        entries = FrequencyAggregator(yield_interval=0).analyze_all(scenario_corpus)
        cache.reset(SearchMatcher(entries, scenario_corpus))

        assert len(cache) == 0
        assert cache.analyze("dog").frequency == 2
        with pytest.raises(NotFoundError):
            cache.analyze("energy")


class TestRelatedWordsAndTrend:
    """Тесты родственных слов и распределения по корпусу."""

    def test_related_words_same_stem_first(self, cache):
        related = cache.analyze("learning").related_words
        assert related[0].word == "learn"
        assert related[0].same_stem is True
        assert all(0.0 <= r.similarity <= 1.0 for r in related)
        assert "learning" not in [r.word for r in related]

    def test_related_words_limit(self, sample_corpus):
        limited = build_cache(sample_corpus, related_limit=1, related_threshold=0.0)
        assert len(limited.analyze("energy").related_words) == 1

    def test_related_words_deterministic(self, sample_corpus):
        first = build_cache(sample_corpus).analyze("learning").related_words
        second = build_cache(sample_corpus).analyze("learning").related_words
        assert first == second

    def test_trend_sums_to_frequency(self, cache):
        for entry in cache.matcher.entries[:15]:
            trend = cache.frequency_trend(entry)
            assert sum(point.count for point in trend) == entry.frequency

    def test_trend_segments(self, cache):
        trend = cache.analyze("energy").frequency_trend
        assert len(trend) == 6
        assert trend[0].period == "segment 1"
        # Пять документов на шесть сегментов: документ 2 попадает во второй
        assert [p.count for p in trend] == [0, 3, 0, 0, 0, 0]

    def test_trend_bucket_count(self, sample_corpus):
        trend = build_cache(sample_corpus, trend_buckets=2).analyze("energy").frequency_trend
        assert [p.period for p in trend] == ["segment 1", "segment 2"]
        assert [p.count for p in trend] == [3, 0]
