import json
import random

import pytest

from gameshow.errors import InvalidQuestionType, QuestionBankUnavailable
from gameshow.question_bank import QuestionBank


def test_get_questions_samples_without_repeats(bank_path):
    bank = QuestionBank(bank_path, rng=random.Random(7))
    picked = bank.get_questions('general', 2)
    assert len(picked) == 2
    assert len({q['question'] for q in picked}) == 2
    assert all(q['type'] == 'general' for q in picked)


def test_count_is_clamped(bank_path):
    bank = QuestionBank(bank_path)
    assert len(bank.get_questions('general', 50)) == 3
    assert len(bank.get_questions('general')) == 3
    assert bank.get_questions('general', -1) == []
    assert len(bank.get_questions('general', 'lots')) == 3


def test_returned_questions_are_copies(bank_path):
    bank = QuestionBank(bank_path)
    picked = bank.get_questions('buzzer', 1)[0]
    picked['answer'] = 'changed'
    assert bank.load()['buzzer'][0]['answer'] == 'Pacific'
    assert 'type' not in bank.load()['buzzer'][0]


@pytest.mark.parametrize('qtype', ['history', '', None])
def test_unknown_category(bank_path, qtype):
    with pytest.raises(InvalidQuestionType):
        QuestionBank(bank_path).get_questions(qtype, 1)


def test_categories(bank_path):
    assert QuestionBank(bank_path).categories() == {'general': 3, 'buzzer': 1}


def test_missing_file(tmp_path):
    bank = QuestionBank(str(tmp_path / 'missing.json'))
    with pytest.raises(QuestionBankUnavailable):
        bank.get_questions('general', 1)


@pytest.mark.parametrize('content', ['{not json', json.dumps([1, 2]), json.dumps({'general': 'nope'})])
def test_malformed_file(tmp_path, content):
    path = tmp_path / 'bad.json'
    path.write_text(content, encoding='utf-8')
    with pytest.raises(QuestionBankUnavailable):
        QuestionBank(str(path)).categories()


def test_bundled_bank_has_every_category():
    categories = QuestionBank().categories()
    for name in ('general', 'buzzer', 'sequence', 'links'):
        assert categories[name] > 0
