from covreport.messages import i18n


def test_explicit_locale_wins_over_process_env(monkeypatch):
    monkeypatch.setenv("COVREPORT_LOCALE", "en")
    assert i18n("testsPassed", "ru", passed=3) == "Тестов пройдено: 3"


def test_process_env_is_the_fallback(monkeypatch):
    monkeypatch.setenv("COVREPORT_LOCALE", "ru")
    assert i18n("reportTitle") == "Отчёт о покрытии"


def test_missing_translation_falls_back_to_english_then_key():
    assert i18n("runLink", "ru", url="u") == "[Workflow run](u)"
    assert i18n("noSuchKey", "en") == "noSuchKey"
