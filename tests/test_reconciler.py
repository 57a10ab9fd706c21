# File: tests/test_reconciler.py
from app.models.comparison import ComparisonResult, PageDiff, Redirect
from app.services.reconciler import reconcile


def _result() -> ComparisonResult:
    return ComparisonResult(pages={
        "a": PageDiff(missing=["gone", "y"], extra=["z"]),
        "b": PageDiff(missing=["y"]),
        "c": PageDiff(missing=["retired"]),
    })


def test_redirect_moves_link_on_every_page():
    new_index = {"z": {"a"}, "x": {"a"}}

    result = reconcile(_result(), {"y": "z", "gone": None}, new_index)

    assert result["a"].missing == ["gone"]
    assert result["a"].redirected == [Redirect(source="y", target="z")]
    assert result["b"].missing == []
    assert result["b"].redirected == [Redirect(source="y", target="z")]


def test_redirect_target_is_not_extra_on_the_same_page():
    result = reconcile(_result(), {"y": "z"}, {"z": {"a"}})
    assert result["a"].extra == []


def test_unknown_target_is_demoted_back_to_missing():
    result = reconcile(_result(), {"retired": "home", "y": "z"}, {"z": {"a"}})

    assert result["c"].missing == ["retired"]
    assert result["c"].redirected == []


def test_input_result_is_left_untouched():
    original = _result()
    reconcile(original, {"y": "z"}, {"z": {"a"}})

    assert original["a"].missing == ["gone", "y"]
    assert original["a"].redirected == []


def test_lists_are_mutually_exclusive():
    result = reconcile(_result(), {"y": "z", "retired": "home"}, {"z": {"a"}})

    for diff in result.pages.values():
        sources = {r.source for r in diff.redirected}
        assert not set(diff.missing) & set(diff.extra)
        assert not set(diff.missing) & sources
        assert not set(diff.extra) & sources


def test_reports_reconcile_milestone(tracker, events):
    reconcile(_result(), {}, {}, progress=tracker)
    assert events == [{"type": "progress", "progress": 90, "fraction": 0.9, "message": "Reconciling redirects"}]


def test_redirect_to_site_root_is_kept():
    result = ComparisonResult(pages={"a": PageDiff(missing=["old-home"], extra=[""])})

    reconciled = reconcile(result, {"old-home": ""}, {"": {"a"}})

    assert reconciled["a"].missing == []
    assert reconciled["a"].redirected == [Redirect(source="old-home", target="")]
    assert reconciled["a"].extra == []


def test_redirect_to_unlinked_site_root_is_demoted():
    result = ComparisonResult(pages={"a": PageDiff(missing=["old-home"])})

    reconciled = reconcile(result, {"old-home": ""}, {"x": {"a"}})

    assert reconciled["a"].missing == ["old-home"]
    assert reconciled["a"].redirected == []
