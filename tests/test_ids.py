import uuid

import pytest

from covreport.util.ids import new_run_id, validate_run_id


def test_validate_run_id_valid():
    uid = str(uuid.uuid4())
    assert validate_run_id(uid) == uid
    assert validate_run_id("gh_123_1") == "gh_123_1"


def test_validate_run_id_invalid():
    with pytest.raises(ValueError, match="Invalid run id"):
        validate_run_id("invalid/id")
    with pytest.raises(ValueError, match="Invalid run id"):
        validate_run_id("invalid id")
    with pytest.raises(ValueError):
        validate_run_id("")


def test_new_run_id():
    rid = new_run_id({})
    assert validate_run_id(rid) == rid


def test_new_run_id_from_actions_env():
    assert new_run_id({"GITHUB_RUN_ID": "555", "GITHUB_RUN_ATTEMPT": "2"}) == "gh_555_2"
