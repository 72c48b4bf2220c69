"""Localized user-facing strings.

`i18n(key, locale=None, **vars)` formats the template for `locale`, or for the
process locale (COVREPORT_LOCALE, default "en") when none is given, falling
back to English and then to the key.
"""

from __future__ import annotations

import os

LOCALE_ENV = "COVREPORT_LOCALE"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "failed": "Coverage report action failed. See the errors above for the failing stages.",
        "initFailed": "Initialization failed: {details}",
        "reportTitle": "Coverage report",
        "reportTitleFor": "Coverage report for `{directory}`",
        "stagesFailed": "The following stages failed",
        "testsPassed": "{passed} tests passed",
        "testsFailed": "{failed} of {total} tests failed",
        "noTestResults": "No test results were found in the coverage report.",
        "baseCoverageMissing": "Base coverage was not collected; no comparison is available.",
        "baseCoverageAvailable": "Base coverage collected for comparison.",
        "runLink": "[Workflow run]({url})",
        "failedTestsTitle": "{count} failed tests",
        "coverageTitle": "{count} uncovered statements",
        "checkRunName": "Coverage report",
    },
    "ru": {
        "failed": "Действие coverage report завершилось с ошибкой.",
        "initFailed": "Ошибка инициализации: {details}",
        "reportTitle": "Отчёт о покрытии",
        "reportTitleFor": "Отчёт о покрытии для `{directory}`",
        "testsPassed": "Тестов пройдено: {passed}",
        "testsFailed": "Тестов упало: {failed} из {total}",
    },
}


def i18n(key: str, locale: str | None = None, **vars: object) -> str:
    if locale is None:
        locale = os.environ.get(LOCALE_ENV, "en")
    template = MESSAGES.get(locale, {}).get(key) or MESSAGES["en"].get(key) or key
    try:
        return template.format(**vars)
    except (KeyError, IndexError):
        return template
