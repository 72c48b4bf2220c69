import pytest
from pathlib import Path

from covreport.config import (
    get_options,
    load_config_file,
    should_install_deps,
    should_run_test_script,
)


def test_defaults_from_minimal_inputs():
    opts = get_options({"INPUT_GITHUB-TOKEN": "abc"})
    assert opts.token == "abc"
    assert opts.test_script == "npx jest"
    assert opts.annotations == "all"
    assert opts.skip_step == "none"
    assert opts.output == ("comment",)
    assert opts.coverage_file is None
    assert opts.working_directory == Path(".")


def test_github_token_env_fallback():
    assert get_options({"GITHUB_TOKEN": "env-token"}).token == "env-token"


def test_missing_token_raises():
    with pytest.raises(ValueError, match="github-token"):
        get_options({})


def test_underscore_input_names_are_accepted():
    opts = get_options({"INPUT_GITHUB_TOKEN": "x", "INPUT_SKIP_STEP": "install"})
    assert opts.skip_step == "install"


def test_invalid_choice_raises():
    with pytest.raises(ValueError, match="annotations"):
        get_options({"INPUT_GITHUB-TOKEN": "x", "INPUT_ANNOTATIONS": "some"})


def test_output_list_and_pr_number():
    opts = get_options(
        {"INPUT_GITHUB-TOKEN": "x", "INPUT_OUTPUT": "comment, report-markdown", "INPUT_PRNUMBER": "12"}
    )
    assert opts.output == ("comment", "report-markdown")
    assert opts.pr_number == 12


def test_invalid_pr_number_raises():
    with pytest.raises(ValueError, match="prnumber"):
        get_options({"INPUT_GITHUB-TOKEN": "x", "INPUT_PRNUMBER": "abc"})


def test_config_file_is_merged_under_inputs(tmp_path):
    (tmp_path / ".covreport.yaml").write_text(
        "test-script: yarn test\nannotations: coverage\nteam: platform\n"
    )
    opts = get_options(
        {
            "INPUT_GITHUB-TOKEN": "x",
            "INPUT_WORKING-DIRECTORY": str(tmp_path),
            "INPUT_ANNOTATIONS": "none",
        }
    )
    assert opts.test_script == "yarn test"
    assert opts.annotations == "none"
    assert opts.extra == {"team": "platform"}


def test_config_file_schema_violation(tmp_path):
    p = tmp_path / ".covreport.yaml"
    p.write_text("skip-step: sometimes\n")
    with pytest.raises(ValueError, match="Invalid .covreport.yaml schema"):
        load_config_file(p)


def test_skip_step_helpers():
    assert should_run_test_script("none")
    assert should_run_test_script("install")
    assert not should_run_test_script("all")
    assert should_install_deps("none")
    assert not should_install_deps("install")
    assert not should_install_deps("all")


def test_locale_input_and_env_fallback():
    assert get_options({"INPUT_GITHUB-TOKEN": "x", "INPUT_LOCALE": "ru"}).locale == "ru"
    assert get_options({"INPUT_GITHUB-TOKEN": "x", "COVREPORT_LOCALE": "ru"}).locale == "ru"
    assert get_options({"INPUT_GITHUB-TOKEN": "x"}).locale is None
