import textwrap
from pathlib import Path
from typing import List

import pytest

from frequency_analyser.config import Config
from frequency_analyser.corpus import SAMPLE_CORPUS
from frequency_analyser.engine import WordFrequencyEngine
from frequency_analyser.interfaces.engine import Document

from .fixtures.sample_texts import SCENARIO_TEXT


@pytest.fixture
def scenario_corpus() -> List[Document]:
    """Корпус из одного документа про лису и собаку."""
    return [Document(id="1", title="Fox and Dog", content=SCENARIO_TEXT, category="Animals")]


@pytest.fixture
def sample_corpus() -> List[Document]:
    """Демонстрационный корпус из пяти статей."""
    return list(SAMPLE_CORPUS)


@pytest.fixture
def inline_config(tmp_path: Path) -> Config:
    """Конфигурация для тестов: синхронное исполнение, без пауз, результаты во временной папке."""
    yaml_text = textwrap.dedent(
        f"""
        aggregation:
          execution: inline
          yield_interval: 0
          timeout_seconds: 5
        export:
          results_folder: "{(tmp_path / 'results').as_posix()}"
        """
    ).strip()
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(yaml_text, encoding="utf-8")
    return Config(config_path=str(cfg_path), configure_logging=False)


@pytest.fixture
def scenario_engine(scenario_corpus, inline_config):
    with WordFrequencyEngine(scenario_corpus, cfg=inline_config) as engine:
        yield engine


@pytest.fixture
def sample_engine(sample_corpus, inline_config):
    with WordFrequencyEngine(sample_corpus, cfg=inline_config) as engine:
        yield engine


def pytest_configure(config):
    """Регистрируем маркеры для проекта."""
    config.addinivalue_line("markers", "integration: интеграционные тесты")
    config.addinivalue_line("markers", "slow: медленные тесты с фоновыми потоками")
