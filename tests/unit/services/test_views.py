import uuid
from datetime import date, datetime, timedelta, timezone
import pytest
from creatorflow.schemas.channel import ChannelRead
from creatorflow.schemas.idea import IdeaRead
from creatorflow.schemas.status import StatusRead
from creatorflow.services import views

T0 = datetime(2026, 10, 1, tzinfo=timezone.utc)
TECH = ChannelRead(id=uuid.uuid4(), name="Tech Reviews", color="#ef4444", icon="Cpu")
VLOG = ChannelRead(id=uuid.uuid4(), name="Vlog Daily", color="#ec4899", icon="Camera")
INITIAL = StatusRead(id=uuid.uuid4(), name="Initial", color="#71717a", order=0)
UPLOAD = StatusRead(id=uuid.uuid4(), name="Upload", color="#22c55e", order=4)


def _idea(title, channel, status, *, minutes=0, scheduled=None, deleted=False):
    ts = T0 + timedelta(minutes=minutes)
    return IdeaRead(
        id=uuid.uuid4(),
        title=title,
        description="",
        channel_id=channel.id,
        status_id=status.id,
        priority="Medium",
        tags=[],
        scheduled_date=scheduled,
        created_at=ts,
        updated_at=ts,
        is_deleted=deleted,
    )


IDEAS = [
    _idea("a", TECH, INITIAL, minutes=1, scheduled=date(2026, 10, 5)),
    _idea("b", TECH, UPLOAD, minutes=2),
    _idea("c", VLOG, INITIAL, minutes=3, scheduled=date(2026, 10, 5)),
    _idea("d", VLOG, INITIAL, minutes=4),
    _idea("binned", TECH, INITIAL, minutes=5, scheduled=date(2026, 10, 5), deleted=True),
]


@pytest.mark.unit
def test_status_folders_follow_pipeline_order():
    folders = views.status_folders(IDEAS, [UPLOAD, INITIAL])
    assert [(f.status.name, f.count) for f in folders] == [("Initial", 3), ("Upload", 1)]


@pytest.mark.unit
def test_channel_cards_and_filters():
    cards = views.channel_cards(IDEAS, [TECH, VLOG])
    assert [(c.channel.name, c.count) for c in cards] == [("Tech Reviews", 2), ("Vlog Daily", 2)]
    assert [i.title for i in views.ideas_in_channel(IDEAS, TECH.id)] == ["a", "b"]
    assert [i.title for i in views.ideas_in_channel(IDEAS, TECH.id, UPLOAD.id)] == ["b"]
    assert [i.title for i in views.ideas_in_status(IDEAS, INITIAL.id)] == ["a", "c", "d"]


@pytest.mark.unit
def test_calendar_excludes_binned_ideas():
    month = views.calendar_month(IDEAS, 2026, 10)
    assert len(month) == 31
    assert [i.title for i in month[date(2026, 10, 5)]] == ["a", "c"]
    assert views.ideas_on_day(IDEAS, date(2026, 10, 6)) == []


@pytest.mark.unit
def test_recent_activity_and_bin():
    assert [i.title for i in views.recent_activity(IDEAS)] == ["d", "c", "b"]
    assert [i.title for i in views.recycle_bin(IDEAS)] == ["binned"]


@pytest.mark.unit
def test_channel_label_fallback():
    assert views.channel_label([TECH], TECH.id) == ("Tech Reviews", "#ef4444")
    assert views.channel_label([TECH], uuid.uuid4()) == ("Unknown Channel", "#52525b")
