from nextstep.services.recent_list import InsertionPolicy, RecentUniqueList


def test_keep_existing_appends_new_values_and_drops_oldest() -> None:
    recent = RecentUniqueList(cap=3, policy=InsertionPolicy.KEEP_EXISTING)

    assert recent.push(["a", "b", "c"], "d") == ["b", "c", "d"]


def test_keep_existing_leaves_known_value_in_place() -> None:
    recent = RecentUniqueList(cap=3, policy=InsertionPolicy.KEEP_EXISTING)

    assert recent.push(["a", "b", "c"], "a") == ["a", "b", "c"]


def test_keep_existing_trims_oversized_input() -> None:
    recent = RecentUniqueList(cap=2, policy=InsertionPolicy.KEEP_EXISTING)

    assert recent.push(["a", "b", "c"], "b") == ["b", "c"]


def test_promote_moves_value_to_front() -> None:
    recent = RecentUniqueList(cap=3, policy=InsertionPolicy.PROMOTE)

    assert recent.push(["a", "b", "c"], "c") == ["c", "a", "b"]


def test_promote_evicts_from_tail() -> None:
    recent = RecentUniqueList(cap=3, policy=InsertionPolicy.PROMOTE)

    assert recent.push(["a", "b", "c"], "d") == ["d", "a", "b"]


def test_push_all_applies_in_order_without_mutating_input() -> None:
    recent = RecentUniqueList(cap=5, policy=InsertionPolicy.PROMOTE)
    original = ["home"]

    assert recent.push_all(original, ["admin", "home", "work"]) == ["work", "home", "admin"]
    assert original == ["home"]
