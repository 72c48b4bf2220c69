from __future__ import annotations

"""Action options.

CONTRACT
- Inputs: GitHub Actions inputs (INPUT_<NAME> env vars) and an optional
  `.covreport.yaml` in the working directory
- Outputs (required):
  - Validated, frozen ActionOptions
- Invariants:
  - Env inputs override file values; file values override defaults
  - annotations / skip_step / package_manager / output are restricted to known values
- Failure:
  - Raises ValueError on invalid file schema or invalid input values
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from .messages import LOCALE_ENV

Annotations = Literal["all", "none", "coverage", "failed-tests"]
SkipStep = Literal["none", "install", "all"]
PackageManager = Literal["npm", "yarn", "pnpm", "bun"]
OutputKind = Literal["comment", "report-markdown"]

ANNOTATIONS: tuple[str, ...] = ("all", "none", "coverage", "failed-tests")
SKIP_STEPS: tuple[str, ...] = ("none", "install", "all")
PACKAGE_MANAGERS: tuple[str, ...] = ("npm", "yarn", "pnpm", "bun")
OUTPUT_KINDS: tuple[str, ...] = ("comment", "report-markdown")

CONFIG_FILE_NAME = ".covreport.yaml"


@dataclass(frozen=True)
class ActionOptions:
    token: str
    test_script: str = "npx jest"
    coverage_file: str | None = None
    base_coverage_file: str | None = None
    working_directory: Path = Path(".")
    annotations: Annotations = "all"
    package_manager: PackageManager = "npm"
    skip_step: SkipStep = "none"
    custom_title: str | None = None
    output: tuple[OutputKind, ...] = ("comment",)
    pr_number: int | None = None
    artifacts_dir: Path = Path(".covreport/runs")
    locale: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


def should_run_test_script(skip_step: str) -> bool:
    return skip_step != "all"


def should_install_deps(skip_step: str) -> bool:
    return skip_step not in ("all", "install")


OPTIONS_SCHEMA = {
    "type": "object",
    "properties": {
        "test-script": {"type": "string"},
        "coverage-file": {"type": ["string", "null"]},
        "base-coverage-file": {"type": ["string", "null"]},
        "annotations": {"type": "string", "enum": list(ANNOTATIONS)},
        "package-manager": {"type": "string", "enum": list(PACKAGE_MANAGERS)},
        "skip-step": {"type": "string", "enum": list(SKIP_STEPS)},
        "custom-title": {"type": ["string", "null"]},
        "output": {
            "oneOf": [
                {"type": "string"},
                {"type": "array", "items": {"type": "string", "enum": list(OUTPUT_KINDS)}},
            ]
        },
        "artifacts-dir": {"type": "string"},
        "locale": {"type": "string"},
        "prnumber": {"type": ["integer", "string", "null"]},
    },
    "additionalProperties": True,
}


def load_config_file(path: Path) -> dict[str, Any]:
    import jsonschema  # lazy import

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    try:
        jsonschema.validate(instance=data, schema=OPTIONS_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Invalid {path.name} schema: {e.message}") from e
    return data


def _input(env: Mapping[str, str], name: str) -> str | None:
    # Actions exposes `with:` keys as INPUT_<NAME>, keeping dashes as-is.
    for key in (f"INPUT_{name.upper()}", f"INPUT_{name.upper().replace('-', '_')}"):
        value = env.get(key)
        if value is not None and value.strip() != "":
            return value.strip()
    return None


def _choice(name: str, value: str, allowed: tuple[str, ...]) -> str:
    if value not in allowed:
        raise ValueError(f"Invalid {name}: {value!r} (expected one of: {', '.join(allowed)})")
    return value


def _parse_output(raw: str | list[str]) -> tuple[str, ...]:
    items = raw if isinstance(raw, list) else [p.strip() for p in raw.split(",")]
    return tuple(_choice("output", p, OUTPUT_KINDS) for p in items if p)


def get_options(env: Mapping[str, str] | None = None) -> ActionOptions:
    """Resolve options for the `initialize` stage."""
    env = os.environ if env is None else env

    working_directory = Path(_input(env, "working-directory") or ".")
    file_values: dict[str, Any] = {}
    config_path = working_directory / CONFIG_FILE_NAME
    if config_path.exists():
        file_values = load_config_file(config_path)

    def pick(name: str, default: Any = None) -> Any:
        value = _input(env, name)
        if value is not None:
            return value
        return file_values.get(name, default)

    token = _input(env, "github-token") or env.get("GITHUB_TOKEN")
    if not token:
        raise ValueError("Missing github-token input (or GITHUB_TOKEN)")

    pr_raw = pick("prnumber")
    try:
        pr_number = int(pr_raw) if pr_raw not in (None, "") else None
    except ValueError as e:
        raise ValueError(f"Invalid prnumber: {pr_raw!r}") from e

    known = set(OPTIONS_SCHEMA["properties"])
    return ActionOptions(
        token=token,
        test_script=str(pick("test-script", "npx jest")),
        coverage_file=pick("coverage-file"),
        base_coverage_file=pick("base-coverage-file"),
        working_directory=working_directory,
        annotations=_choice("annotations", str(pick("annotations", "all")), ANNOTATIONS),
        package_manager=_choice(
            "package-manager", str(pick("package-manager", "npm")), PACKAGE_MANAGERS
        ),
        skip_step=_choice("skip-step", str(pick("skip-step", "none")), SKIP_STEPS),
        custom_title=pick("custom-title"),
        output=_parse_output(pick("output", "comment")),
        pr_number=pr_number,
        artifacts_dir=Path(str(pick("artifacts-dir", ".covreport/runs"))),
        locale=pick("locale") or env.get(LOCALE_ENV),
        extra={k: v for k, v in file_values.items() if k not in known},
    )


if __name__ == "__main__":
    import sys

    try:
        print(get_options())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
