import logging
import os
import re
import textwrap

from frequency_analyser.config import Config


def _write(path, text):
    path.write_text(textwrap.dedent(text).strip(), encoding="utf-8")
    return path


def test_config_defaults_when_missing_file(tmp_path):
    """
    Проверяет, что при отсутствии файла конфигурации подставляются дефолтные значения.
    """
    cwd = os.getcwd()
    try:
        os.chdir(tmp_path)
        cfg = Config(configure_logging=False)
        assert cfg.get_min_word_length() == 2
        assert cfg.include_stopwords() is False
        assert cfg.get_batch_size() == 10
        assert cfg.get_yield_every() == 5
        assert cfg.get_execution_mode() == "background"
        assert cfg.get_job_timeout() == 30.0
        assert cfg.get_max_contexts_total() == 10
        assert cfg.get_article_scopes()["bookmarked"] == {"ids": ["1", "4"]}
        assert cfg.get_history_limit() == 20
        assert cfg.get_json_word_limit() == 100
        assert cfg.get_results_folder() == "data/results"
        assert cfg.get_main_sheet_name() == "Word Frequency"
    finally:
        os.chdir(cwd)


def test_config_overrides_from_yaml(tmp_path):
    """
    Значения из YAML накладываются на дефолты, не затирая соседние ключи секции.
    """
    cfg_path = _write(tmp_path / "config.yaml", """
        aggregation:
          batch_size: 3
        export:
          main_sheet_name: "Custom Sheet"
        """)

    cfg = Config(config_path=str(cfg_path), configure_logging=False)

    assert cfg.get_batch_size() == 3
    assert cfg.get_main_sheet_name() == "Custom Sheet"
    # Соседние ключи секции остаются дефолтными
    assert cfg.get_yield_every() == 5
    assert cfg.get_json_word_limit() == 100


def test_config_env_overrides(tmp_path, monkeypatch):
    """
    FREQUENCY_ANALYSER_* переопределяют конфиг; вложенность через двойное подчёркивание.
    """
    monkeypatch.setenv("FREQUENCY_ANALYSER_AGGREGATION__BATCH_SIZE", "7")
    monkeypatch.setenv("FREQUENCY_ANALYSER_TEXT_ANALYSIS__INCLUDE_STOPWORDS", "true")
    monkeypatch.setenv("FREQUENCY_ANALYSER_AGGREGATION__YIELD_INTERVAL", "0.5")
    monkeypatch.setenv("FREQUENCY_ANALYSER_EXPORT__MAIN_SHEET_NAME", "Words")

    cfg = Config(config_path=str(tmp_path / "nonexistent.yaml"), configure_logging=False)

    assert cfg.get_batch_size() == 7
    assert cfg.include_stopwords() is True
    assert cfg.get_yield_interval() == 0.5
    assert cfg.get_main_sheet_name() == "Words"


def test_config_validation(tmp_path):
    """
    Некорректные значения приводятся к допустимым.
    """
    cfg_path = _write(tmp_path / "config.yaml", """
        text_analysis:
          min_word_length: 0
        aggregation:
          batch_size: 0
          execution: turbo
        """)

    cfg = Config(config_path=str(cfg_path), configure_logging=False)

    assert cfg.get_min_word_length() == 1
    assert cfg.get_batch_size() == 1
    assert cfg.get_execution_mode() == "background"


def test_config_profile(tmp_path, monkeypatch):
    """
    FREQUENCY_ANALYSER_ENV=testing подхватывает config.test.yaml рядом с основным файлом.
    """
    _write(tmp_path / "config.yaml", """
        aggregation:
          execution: background
        """)
    _write(tmp_path / "config.test.yaml", """
        aggregation:
          execution: inline
        """)
    monkeypatch.setenv("FREQUENCY_ANALYSER_ENV", "testing")

    cfg = Config(config_path=str(tmp_path / "config.yaml"), configure_logging=False)

    assert cfg.get_execution_mode() == "inline"
    assert cfg.get_env("FREQUENCY_ANALYSER_ENV") == "testing"


def test_config_broken_yaml_falls_back(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("aggregation: [unclosed", encoding="utf-8")

    cfg = Config(config_path=str(cfg_path), configure_logging=False)

    assert cfg.get_batch_size() == 10


def test_config_get_missing_key():
    cfg = Config(configure_logging=False)
    assert cfg.get("no.such.key", "fallback") == "fallback"
    assert cfg.get("aggregation.batch_size.deeper") is None


def test_logging_file_has_timestamp(tmp_path):
    cfg_path = _write(tmp_path / "config.yaml", """
        logging:
          log_file: "logs/app.log"
        """)
    cfg = Config(config_path=str(cfg_path), configure_logging=False)
    assert re.fullmatch(r"logs/app_\d{8}_\d{6}\.log", cfg.get_logging_file())


def test_configure_logging_writes_file(tmp_path):
    log_dir = tmp_path / "logs"
    cfg_path = _write(tmp_path / "config.yaml", f"""
        logging:
          level: WARNING
          log_to_file: true
          log_file: "{(log_dir / 'frequency_analyser.log').as_posix()}"
        """)
    cfg = Config(config_path=str(cfg_path), configure_logging=False)

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        cfg._configure_logging_if_needed(force=True)
        assert root.handlers[0].level == logging.WARNING
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
        assert list(log_dir.glob("frequency_analyser_*.log"))
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)
        root._frequency_analyser_configured = False


def test_cleanup_old_log_files_keeps_newest(tmp_path):
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    for i in range(4):
        path = log_dir / f"analysis_2026010{i}_000000.log"
        path.write_text("x", encoding="utf-8")
        os.utime(path, (1000 + i, 1000 + i))
    (log_dir / "other.log").write_text("x", encoding="utf-8")

    cfg_path = _write(tmp_path / "config.yaml", f"""
        logging:
          log_file: "{(log_dir / 'analysis.log').as_posix()}"
          max_log_files: 2
        """)
    Config(config_path=str(cfg_path), configure_logging=False).cleanup_old_log_files()

    remaining = sorted(p.name for p in log_dir.iterdir())
    assert remaining == ["analysis_20260102_000000.log", "analysis_20260103_000000.log", "other.log"]
