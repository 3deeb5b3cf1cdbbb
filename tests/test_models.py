from vaultscribe.data.models import RecordingSession


def test_elapsed_excludes_paused_time() -> None:
    session = RecordingSession(started_at=100.0)

    assert session.elapsed_ms(101.0) == 1000.0

    session.mark_paused(102.0)
    assert session.is_paused
    assert session.pause_started_at == 102.0
    assert session.elapsed_ms(103.0) == 2000.0
    assert session.elapsed_ms(110.0) == 2000.0

    session.mark_resumed(110.0)
    assert not session.is_paused
    assert session.pause_started_at is None
    assert session.total_paused_ms == 8000.0
    assert session.elapsed_ms(111.0) == 3000.0


def test_elapsed_is_monotonic_across_pause_cycles() -> None:
    session = RecordingSession(started_at=0.0)
    readings = []
    now = 0.0
    for step in range(12):
        now += 0.5
        if step % 4 == 1:
            session.mark_paused(now)
        elif step % 4 == 3:
            session.mark_resumed(now)
        readings.append(session.elapsed_ms(now))

    assert readings == sorted(readings)
    assert all(reading >= 0 for reading in readings)


def test_repeated_pause_does_not_reset_pause_start() -> None:
    session = RecordingSession(started_at=0.0)
    session.mark_paused(1.0)
    session.mark_paused(5.0)

    assert session.pause_started_at == 1.0


def test_elapsed_never_negative_with_clock_skew() -> None:
    session = RecordingSession(started_at=50.0)

    assert session.elapsed_ms(49.0) == 0.0
