"""
Компонент для экспорта результатов анализа частотности.

Форматы: CSV (все поля в кавычках, документы через ';'), JSON
(статистика и первые 100 слов) и Excel (слова + статистика).
PDF объявлен, но не реализован.
"""

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from ..errors import ProcessingError, UnsupportedFormatError
from ..interfaces.engine import CorpusStatistics, ResultExporterInterface, WordEntry
from .frequency_aggregator import FrequencyAggregator

logger = logging.getLogger(__name__)

CSV_COLUMNS = ['word', 'frequency', 'articles', 'stemmed']
SUPPORTED_FORMATS = ('csv', 'json', 'xlsx')


class ResultExporter(ResultExporterInterface):
    """Экспортёр результатов анализа частотности."""

    def __init__(self, output_dir: Union[str, Path] = "data/results", json_word_limit: int = 100,
                 filename_prefix: str = "word-frequency-analysis",
                 main_sheet_name: str = "Word Frequency"):
        """
        Инициализирует экспортёр.

        Args:
            output_dir: Папка для файлов без явного пути
            json_word_limit: Максимум слов в JSON
            filename_prefix: Префикс имени файла по умолчанию
            main_sheet_name: Название листа со словами в Excel
        """
        self.output_dir = Path(output_dir)
        self.json_word_limit = json_word_limit
        self.filename_prefix = filename_prefix
        self.main_sheet_name = main_sheet_name

    def _to_dataframe(self, entries: Sequence[WordEntry]) -> pd.DataFrame:
        rows = [
            {
                'word': e.word,
                'frequency': e.frequency,
                'articles': ';'.join(e.articles),
                'stemmed': e.stemmed or '',
            }
            for e in entries
        ]
        return pd.DataFrame(rows, columns=CSV_COLUMNS)

    def to_csv(self, entries: Sequence[WordEntry]) -> str:
        """
        Сериализует записи в CSV.

        Args:
            entries: Записи WordEntry

        Returns:
            Текст CSV с заголовком word,frequency,articles,stemmed
        """
        df = self._to_dataframe(entries).astype(str)
        return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')

    def to_json(self, entries: Sequence[WordEntry], statistics: CorpusStatistics) -> str:
        """
        Сериализует записи в JSON {exportedAt, statistics, words}.

        Args:
            entries: Записи WordEntry
            statistics: Статистика по всем записям

        Returns:
            Текст JSON; в words не более json_word_limit записей
        """
        data = {
            'exportedAt': datetime.now(timezone.utc).isoformat(),
            'statistics': statistics.to_dict(),
            'words': [
                {
                    'word': e.word,
                    'frequency': e.frequency,
                    'articles': list(e.articles),
                    'stemmed': e.stemmed,
                }
                for e in list(entries)[:self.json_word_limit]
            ],
        }
        return json.dumps(data, ensure_ascii=False, indent=2)

    def to_excel(self, entries: Sequence[WordEntry], filepath: Union[str, Path],
                 statistics: CorpusStatistics) -> Path:
        """
        Записывает Excel-файл: лист со словами и лист статистики.

        Args:
            entries: Записи WordEntry
            filepath: Путь к файлу (.xlsx добавляется при отсутствии суффикса)
            statistics: Статистика по записям

        Returns:
            Путь к записанному файлу
        """
        filepath = Path(filepath)
        if not filepath.suffix:
            filepath = filepath.with_suffix('.xlsx')

        df = self._to_dataframe(entries)
        stats_df = pd.DataFrame({
            'Parameter': list(statistics.to_dict().keys()) + ['exportedAt'],
            'Value': list(statistics.to_dict().values()) + [datetime.now().strftime('%Y-%m-%d %H:%M:%S')],
        })

        with pd.ExcelWriter(filepath, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name=self.main_sheet_name, index=False)
            stats_df.to_excel(writer, sheet_name='Statistics', index=False)
        return filepath

    def default_path(self, fmt: str) -> Path:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        return self.output_dir / f"{self.filename_prefix}_{timestamp}.{fmt}"

    def export(self, entries: Sequence[WordEntry], fmt: str,
               filepath: Optional[Union[str, Path]] = None,
               statistics: Optional[CorpusStatistics] = None) -> Path:
        """
        Экспортирует записи в файл нужного формата.

        Args:
            entries: Записи WordEntry
            fmt: 'csv', 'json' или 'xlsx'
            filepath: Путь к файлу (None = папка результатов с временной меткой)
            statistics: Статистика (None = посчитать по entries)

        Returns:
            Путь к записанному файлу

        Raises:
            UnsupportedFormatError: 'pdf' или неизвестный формат
            ProcessingError: Ошибка записи файла
        """
        fmt = (fmt or '').lower().lstrip('.')
        if fmt == 'pdf':
            raise UnsupportedFormatError("Экспорт в PDF не реализован")
        if fmt not in SUPPORTED_FORMATS:
            raise UnsupportedFormatError(f"Неподдерживаемый формат экспорта: {fmt}")

        path = Path(filepath) if filepath else self.default_path(fmt)
        if statistics is None:
            statistics = FrequencyAggregator.calculate_statistics(entries)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if fmt == 'csv':
                path.write_text(self.to_csv(entries), encoding='utf-8')
            elif fmt == 'json':
                path.write_text(self.to_json(entries, statistics), encoding='utf-8')
            else:
                path = self.to_excel(entries, path, statistics)
        except (OSError, ValueError) as e:
            logger.error(f"Ошибка экспорта в {fmt}: {e}")
            raise ProcessingError(f"Не удалось экспортировать результаты в {fmt}: {e}") from e

        logger.info(f"Результаты экспортированы ({fmt}, записей {len(entries)}): {path}")
        return path

    def export_all_formats(self, entries: Sequence[WordEntry],
                           statistics: Optional[CorpusStatistics] = None) -> Dict[str, Path]:
        """
        Экспортирует записи во все поддерживаемые форматы в папку результатов.

        Returns:
            Словарь {формат: путь}
        """
        exported: Dict[str, Path] = {}
        for fmt in SUPPORTED_FORMATS:
            exported[fmt] = self.export(entries, fmt, statistics=statistics)
        return exported

    @staticmethod
    def supported_formats() -> List[str]:
        return list(SUPPORTED_FORMATS)
