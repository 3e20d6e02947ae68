from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from conftest import TODAY, YESTERDAY, make_item

from rdl.domain.periods import is_mutable, newest_first, period_key
from rdl.domain.store import LineItemStore


def test_period_key_is_stable_within_a_local_day():
    assert period_key(datetime(2024, 6, 15, 0, 0, 1)) == "2024-06-15"
    assert period_key(datetime(2024, 6, 15, 23, 59, 59)) == "2024-06-15"
    assert period_key(date(2024, 6, 15)) == "2024-06-15"


def test_period_key_converts_aware_timestamps_to_local_zone():
    hcm = ZoneInfo("Asia/Ho_Chi_Minh")
    # 18:30 UTC is already the next day in UTC+7
    ts = datetime(2024, 6, 14, 18, 30, tzinfo=timezone.utc)
    assert period_key(ts, hcm) == "2024-06-15"
    assert period_key("2024-06-14T18:30:00.000Z", hcm) == "2024-06-15"


def test_period_key_accepts_plain_date_strings():
    assert period_key("2024-06-15") == "2024-06-15"
    assert period_key("2024-06-15 08:00:00") == "2024-06-15"


def test_is_mutable_only_for_current_period():
    assert is_mutable(TODAY, TODAY)
    assert not is_mutable(YESTERDAY, TODAY)


def test_periods_are_ordered_newest_first():
    assert newest_first(["2024-05-01", "2024-06-15", "2023-12-31"]) == ["2024-06-15", "2024-05-01", "2023-12-31"]

    store = LineItemStore.from_periods({
        YESTERDAY: [make_item("a")],
        TODAY: [make_item("b")],
    })
    views = store.ordered_periods(TODAY)
    assert [v.key for v in views] == [TODAY, YESTERDAY]
    assert [v.mutable for v in views] == [True, False]


def test_store_changes_return_new_store_and_drop_empty_periods():
    store = LineItemStore.from_periods({TODAY: [make_item("a")], YESTERDAY: []})
    assert store.keys() == [TODAY]

    key, idx, _item = store.locate("a")
    emptied = store.remove_item(key, idx)

    assert TODAY not in emptied
    assert TODAY in store
    assert store.locate("missing") is None


def test_all_items_walks_periods_newest_first():
    store = LineItemStore.from_periods({
        YESTERDAY: [make_item("old")],
        TODAY: [make_item("new-1"), make_item("new-2")],
    })
    assert [(k, it.id) for k, it in store.all_items()] == [
        (TODAY, "new-1"),
        (TODAY, "new-2"),
        (YESTERDAY, "old"),
    ]


def test_period_key_of_midnight_boundary():
    start = datetime(2024, 6, 15)
    assert period_key(start - timedelta(microseconds=1)) == "2024-06-14"
