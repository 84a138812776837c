"""
Загрузка корпуса документов.

Поддерживаемые источники:
- JSON: список документов или объект {"documents": [...]}
- CSV / Excel: таблица с колонками id, title, content, category

Каждый документ — неизменяемый Document; id приводится к строке.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import pandas as pd

from .errors import ValidationError
from .interfaces.engine import Document

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('id', 'content')


def document_from_dict(data: Dict[str, Any]) -> Document:
    """
    Создаёт Document из словаря.

    Args:
        data: Словарь с ключами id, content и необязательными title, category

    Returns:
        Document

    Raises:
        ValidationError: Нет обязательного поля
    """
    missing = [f for f in REQUIRED_FIELDS if data.get(f) is None]
    if missing:
        raise ValidationError(f"В документе нет обязательных полей: {', '.join(missing)}")
    return Document(
        id=str(data['id']),
        title=str(data.get('title') or ''),
        content=str(data['content']),
        category=str(data.get('category') or ''),
    )


def documents_from_records(records: Iterable[Dict[str, Any]]) -> List[Document]:
    return [document_from_dict(r) for r in records]


def load_corpus(path: Union[str, Path]) -> List[Document]:
    """
    Загружает корпус из файла.

    Args:
        path: Путь к .json, .csv или .xlsx

    Returns:
        Список документов в порядке файла

    Raises:
        ValidationError: Неизвестный формат, нет файла или неверная структура
    """
    path = Path(path)
    if not path.exists():
        raise ValidationError(f"Файл корпуса не найден: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == '.json':
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if isinstance(data, dict):
                data = data.get('documents', [])
            if not isinstance(data, list):
                raise ValidationError("JSON корпуса должен быть списком документов")
            records = data
        elif suffix == '.csv':
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
            records = df.to_dict(orient='records')
        elif suffix in ('.xlsx', '.xls'):
            df = pd.read_excel(path, dtype=str).fillna('')
            records = df.to_dict(orient='records')
        else:
            raise ValidationError(f"Неподдерживаемый формат корпуса: {suffix or path.name}")
    except (OSError, ValueError) as e:
        raise ValidationError(f"Не удалось прочитать корпус {path}: {e}") from e

    documents = documents_from_records(records)
    logger.info(f"Загружен корпус: {path} (документов: {len(documents)})")
    return documents


SAMPLE_CORPUS: List[Document] = [
    Document(
        id='1',
        title='The Future of Artificial Intelligence',
        content=(
            "Artificial intelligence is transforming the way we work, learn, and interact with technology. "
            "Machine learning algorithms are becoming increasingly sophisticated, enabling computers to recognize "
            "patterns, make predictions, and solve complex problems. Deep learning networks, inspired by the human "
            "brain, are revolutionizing fields from image recognition to natural language processing. As AI "
            "continues to evolve, we must consider both its tremendous potential and the ethical challenges it presents."
        ),
        category='Technology',
    ),
    Document(
        id='2',
        title='Sustainable Energy Solutions',
        content=(
            "Renewable energy sources like solar, wind, and hydroelectric power are essential for combating climate "
            "change. Solar panels have become more efficient and affordable, making solar energy accessible to more "
            "households and businesses. Wind turbines are generating clean electricity across the globe, while "
            "hydroelectric dams harness the power of flowing water. Energy storage technologies are advancing "
            "rapidly, solving the intermittency challenges of renewable sources."
        ),
        category='Environment',
    ),
    Document(
        id='3',
        title='The Art of Effective Communication',
        content=(
            "Communication is the foundation of all human relationships and professional success. Active listening "
            "involves fully concentrating on the speaker, understanding their message, and responding thoughtfully. "
            "Clear speaking requires organizing your thoughts, choosing appropriate words, and maintaining confident "
            "body language. Written communication should be concise, well-structured, and tailored to your audience. "
            "Emotional intelligence plays a crucial role in understanding and managing both your own emotions and "
            "those of others."
        ),
        category='Personal Development',
    ),
    Document(
        id='4',
        title='Modern Web Development Trends',
        content=(
            "Web development continues to evolve with new frameworks, tools, and best practices. React, Vue, and "
            "Angular remain popular choices for building dynamic user interfaces. TypeScript has gained widespread "
            "adoption for its type safety and developer experience. Progressive web apps combine the best of web and "
            "mobile applications, offering offline functionality and native-like performance. Serverless "
            "architecture is changing how developers deploy and scale applications."
        ),
        category='Technology',
    ),
    Document(
        id='5',
        title='Healthy Lifestyle Habits',
        content=(
            "Maintaining a healthy lifestyle requires consistent effort and balanced choices. Regular exercise "
            "strengthens muscles, improves cardiovascular health, and boosts mental well-being. A nutritious diet "
            "rich in fruits, vegetables, whole grains, and lean proteins provides essential nutrients. Adequate sleep "
            "is crucial for physical recovery and cognitive function. Stress management through meditation, yoga, "
            "or other relaxation techniques helps maintain mental health."
        ),
        category='Health',
    ),
]
