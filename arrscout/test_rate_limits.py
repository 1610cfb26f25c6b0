from __future__ import annotations

import pytest

from arrscout import rate_limits


def _install_fake_clock(monkeypatch: pytest.MonkeyPatch, start: float) -> tuple[dict, list[float]]:
    clock = {"now": start}
    waits: list[float] = []

    monkeypatch.setattr(rate_limits.time, "monotonic", lambda: clock["now"])

    async def _fake_sleep(delay: float) -> None:
        waits.append(delay)
        clock["now"] += delay

    monkeypatch.setattr(rate_limits.asyncio, "sleep", _fake_sleep)
    return clock, waits


@pytest.mark.asyncio
async def test_rate_limit_waits_for_same_server(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_rate_limits_for_tests()
    _clock, waits = _install_fake_clock(monkeypatch, 100.0)

    first_wait = await rate_limits.enforce_min_interval("http://radarr.local:7878/")
    second_wait = await rate_limits.enforce_min_interval("http://RADARR.local:7878")

    assert first_wait == 0.0
    assert second_wait == pytest.approx(rate_limits.SERVICE_MIN_INTERVAL_SECONDS)
    assert waits == [pytest.approx(rate_limits.SERVICE_MIN_INTERVAL_SECONDS)]


@pytest.mark.asyncio
async def test_rate_limit_does_not_cross_throttle_servers(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_rate_limits_for_tests()
    _clock, waits = _install_fake_clock(monkeypatch, 200.0)

    radarr_wait = await rate_limits.enforce_min_interval("http://radarr.local:7878")
    sonarr_wait = await rate_limits.enforce_min_interval("http://sonarr.local:8989")

    assert radarr_wait == 0.0
    assert sonarr_wait == 0.0
    assert waits == []


@pytest.mark.asyncio
async def test_prowlarr_window_limit_delays_eleventh_request(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_rate_limits_for_tests()
    _clock, waits = _install_fake_clock(monkeypatch, 300.0)

    for _ in range(10):
        await rate_limits.enforce_min_interval("http://prowlarr.local", 0.0, service_type="prowlarr")
    wait = await rate_limits.enforce_min_interval("http://prowlarr.local", 0.0, service_type="prowlarr")

    assert waits == [pytest.approx(rate_limits.SERVICE_RATE_LIMIT_WINDOW_SECONDS)]
    assert wait == pytest.approx(rate_limits.SERVICE_RATE_LIMIT_WINDOW_SECONDS)


@pytest.mark.asyncio
async def test_unknown_service_type_only_gets_min_interval(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_rate_limits_for_tests()
    _clock, waits = _install_fake_clock(monkeypatch, 400.0)

    for _ in range(12):
        await rate_limits.enforce_min_interval("http://other.local", 0.0, service_type="plex")

    assert waits == []


def test_pacer_is_shared_per_normalized_server_url() -> None:
    rate_limits._reset_rate_limits_for_tests()

    pacer = rate_limits.pacer_for("http://Sonarr.local:8989/")

    assert rate_limits.pacer_for("http://sonarr.local:8989") is pacer
    assert rate_limits.pacer_for("http://sonarr.local:8990") is not pacer
