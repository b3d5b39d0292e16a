import json
import logging
import os
import random
import threading
from typing import Any, Dict, List, Optional

from gameshow.errors import InvalidQuestionType, QuestionBankUnavailable


logger = logging.getLogger(__name__)

DEFAULT_PATH = os.path.join(os.path.dirname(__file__), 'data', 'questions.json')


class QuestionBank:
    """Read-only question catalogue loaded from a JSON file.

    The file maps a category name (``buzzer``, ``sequence``, ...) to a list
    of question objects. It is read once, on first use.
    """

    def __init__(self, path: Optional[str] = None, rng: Optional[random.Random] = None):
        self.path = path or DEFAULT_PATH
        self.rng = rng or random.Random()
        self._data: Optional[Dict[str, List[Dict[str, Any]]]] = None
        self._lock = threading.Lock()

    def load(self) -> Dict[str, List[Dict[str, Any]]]:
        with self._lock:
            if self._data is None:
                try:
                    with open(self.path, encoding='utf-8') as fh:
                        data = json.load(fh)
                except (OSError, ValueError) as exc:
                    logger.error(f"[questions] failed to load {self.path}: {exc}")
                    raise QuestionBankUnavailable() from exc
                if not isinstance(data, dict) or not all(isinstance(v, list) for v in data.values()):
                    logger.error(f"[questions] {self.path} is not a mapping of category -> list")
                    raise QuestionBankUnavailable()
                self._data = data
            return self._data

    def categories(self) -> Dict[str, int]:
        return {name: len(items) for name, items in self.load().items()}

    def get_questions(self, qtype, count=None) -> List[Dict[str, Any]]:
        """Return up to ``count`` questions of ``qtype`` in random order."""
        data = self.load()
        if not qtype or qtype not in data:
            raise InvalidQuestionType()
        pool = data[qtype]
        try:
            n = len(pool) if count is None else max(0, min(int(count), len(pool)))
        except (TypeError, ValueError):
            n = len(pool)
        return [{'type': qtype, **q} for q in self.rng.sample(pool, n)]
