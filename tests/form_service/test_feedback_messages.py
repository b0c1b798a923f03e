"""
Feedback text lookup tests.
"""

import pytest

from form_service.models import EXERCISE_RULES, get_feedback_text, localize_feedback, normalize_locale
from form_service.models.feedback_messages import MESSAGES


def test_every_key_has_text_in_every_locale():
    keys = {"general.perfect_form", "general.rep_complete", "general.no_pose"}
    for rule in EXERCISE_RULES.values():
        keys.update(rule.feedback_keys)

    for locale, messages in MESSAGES.items():
        missing = keys - set(messages)
        assert not missing, f"{locale} is missing {sorted(missing)}"


@pytest.mark.parametrize("locale, expected", [
    ("pt", "pt"),
    ("pt-BR", "pt"),
    ("pt_BR", "pt"),
    ("EN-us", "en"),
    ("es-MX", "es"),
    ("fr_CA", "fr"),
    ("de", "en"),
    (None, "en"),
    ("", "en"),
])
def test_normalize_locale(locale, expected):
    assert normalize_locale(locale) == expected


def test_lookup_in_portuguese():
    assert get_feedback_text("squat.go_deeper", "pt-BR") == "Desça um pouco mais"


def test_lookup_in_spanish_and_french():
    assert get_feedback_text("plank.level_shoulders", "es") == "Mantén los hombros nivelados"
    assert get_feedback_text("plank.level_shoulders", "fr-FR") == "Gardez les épaules à niveau"


def test_every_locale_is_supported():
    assert set(MESSAGES) == {"en", "pt", "es", "fr"}


def test_unknown_locale_falls_back_to_default():
    assert get_feedback_text("squat.go_deeper", "de") == "Go a little deeper"


def test_unknown_key_is_returned_unchanged():
    assert get_feedback_text("squat.not_a_cue", "pt") == "squat.not_a_cue"


def test_localize_feedback_keeps_order():
    texts = localize_feedback(["general.perfect_form", "plank.raise_hips"], "en")
    assert texts == ["Perfect form! Keep it up!", "Raise your hips, don't let them sag"]
