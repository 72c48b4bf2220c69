import pytest

from covreport.collector import CollectedData, DataCollector, ErrorRecord


def test_add_disjoint_fields_keeps_both():
    c = DataCollector()
    c.add({"head_coverage": {"a": 1}})
    c.add({"base_coverage": {"b": 2}})
    data = c.get()
    assert data.head_coverage == {"a": 1}
    assert data.base_coverage == {"b": 2}


def test_add_same_field_last_write_wins():
    c = DataCollector()
    c.add(head_coverage={"a": 1})
    c.add(head_coverage={"a": 2})
    assert c.get().head_coverage == {"a": 2}


def test_add_rejects_reserved_and_unknown_fields():
    c = DataCollector()
    with pytest.raises(ValueError, match="errors"):
        c.add(errors=())
    with pytest.raises(ValueError, match="whatever"):
        c.add({"whatever": 1})
    assert c.get() == CollectedData()


def test_add_error_is_append_only():
    c = DataCollector()
    boom = RuntimeError("boom")
    c.add_error("headCoverage", boom)
    c.add(head_coverage={"x": 1})
    c.add_error("publishReport", "plain text cause")

    errors = c.get().errors
    assert [e.stage for e in errors] == ["headCoverage", "publishReport"]
    assert errors[0].cause is boom
    assert c.has_errors


def test_get_returns_snapshot():
    c = DataCollector()
    snap = c.get()
    c.add_error("s", "x")
    c.info("hello")
    assert snap.errors == ()
    assert c.get().messages == ("hello",)


def test_error_record_describe():
    assert ErrorRecord("s", ValueError("bad")).describe() == "ValueError: bad"
    assert ErrorRecord("s", KeyError()).describe() == "KeyError: KeyError"
    assert ErrorRecord("s", "text").describe() == "text"


def test_collectors_are_independent():
    main = DataCollector()
    disposable = DataCollector(name="base")
    disposable.add_error("runTest", "failed")
    assert not main.has_errors
    assert disposable.has_errors
