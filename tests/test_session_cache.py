from __future__ import annotations

import threading

from codeauth.session_cache import (
	MIN_WINDOW_SECONDS,
	SessionCache,
	SessionRecord,
	mask_token,
)


def _record(email="a@b.com", expiration=1999999999, refresh_left=3):
	return SessionRecord(email=email, expiration=expiration, refresh_left=refresh_left)


def _cache(clock, enabled=True, window=30):
	cache = SessionCache(clock=clock)
	cache.configure(enabled, window)
	return cache


def test_get_unknown_token_misses(clock):
	cache = _cache(clock)
	assert cache.get("never-seen") is None


def test_put_then_get_within_window(clock):
	cache = _cache(clock)
	cache.put("abc", _record())
	clock.advance(29)
	assert cache.get("abc") == _record()


def test_put_overwrites_existing_entry(clock):
	cache = _cache(clock)
	cache.put("abc", _record(refresh_left=3))
	cache.put("abc", _record(refresh_left=1))
	assert cache.get("abc").refresh_left == 1


def test_first_read_after_window_misses_for_every_key(clock):
	cache = _cache(clock)
	cache.put("abc", _record())
	cache.put("def", _record(email="c@d.com"))
	clock.advance(30)

	assert cache.get("zzz") is None
	assert cache.get("abc") is None
	assert cache.get("def") is None
	assert len(cache) == 0
	assert cache.window_start == clock.now


def test_expired_window_is_cleared_before_write(clock):
	cache = _cache(clock)
	cache.put("old", _record())
	clock.advance(31)
	cache.put("new", _record(email="n@b.com"))

	assert "old" not in cache
	assert cache.get("new").email == "n@b.com"


def test_new_window_holds_entries_again(clock):
	cache = _cache(clock)
	clock.advance(30)
	assert cache.get("abc") is None
	cache.put("abc", _record())
	clock.advance(10)
	assert cache.get("abc") is not None


def test_remove_and_clear(clock):
	cache = _cache(clock)
	cache.put("abc", _record())
	cache.put("def", _record())
	cache.remove("abc")
	cache.remove("missing")
	assert cache.get("abc") is None
	assert cache.get("def") is not None

	clock.advance(5)
	cache.clear()
	assert len(cache) == 0
	assert cache.window_start == clock.now


def test_remove_email_keeps_requested_token(clock):
	cache = _cache(clock)
	cache.put("t1", _record(email="a@b.com"))
	cache.put("t2", _record(email="a@b.com"))
	cache.put("t3", _record(email="x@y.com"))

	assert cache.remove_email("a@b.com", keep="t1") == 1
	assert "t1" in cache
	assert "t2" not in cache
	assert "t3" in cache


def test_disabled_cache_is_a_guaranteed_miss(clock):
	cache = _cache(clock, enabled=False)
	cache.put("abc", _record())
	assert cache.get("abc") is None
	assert len(cache) == 0
	assert cache.remove_email("a@b.com") == 0


def test_window_below_minimum_is_clamped(clock, caplog):
	cache = _cache(clock, window=1)
	assert cache.window_duration == MIN_WINDOW_SECONDS
	assert "clamped" in caplog.text


def test_short_window_is_accepted_with_warning(clock, caplog):
	cache = _cache(clock, window=10)
	assert cache.window_duration == 10
	assert "recommended" in caplog.text


def test_invalid_window_falls_back(clock):
	cache = _cache(clock, window="soon")
	assert cache.window_duration == 15


def test_concurrent_writers_do_not_lose_entries(clock):
	cache = _cache(clock)

	def _writer(prefix):
		for i in range(200):
			cache.put(f"{prefix}-{i}", _record())
			cache.get(f"{prefix}-{i}")

	threads = [threading.Thread(target=_writer, args=(f"w{n}",)) for n in range(8)]
	for t in threads:
		t.start()
	for t in threads:
		t.join()

	assert len(cache) == 8 * 200


def test_sweeper_starts_and_stops():
	cache = SessionCache()
	cache.configure(True, MIN_WINDOW_SECONDS)
	cache.put("abc", _record())
	cache.start_sweeper()
	assert cache.sweeper_running

	cache.stop_sweeper(timeout=2)
	assert not cache.sweeper_running


def test_sweep_worker_clears_each_tick(clock, monkeypatch):
	cache = _cache(clock)
	cache.put("abc", _record())
	ticks = iter([False, True])
	monkeypatch.setattr(cache._sweeper_stop, "wait", lambda timeout: next(ticks))

	cache._sweep_worker()
	assert len(cache) == 0


def test_sweeper_not_started_when_disabled(clock):
	cache = _cache(clock, enabled=False)
	cache.start_sweeper()
	assert not cache.sweeper_running


def test_mask_token():
	assert mask_token(None) == "<empty>"
	assert mask_token("abc") == "***"
	assert mask_token("abcdefghijkl") == "abcdef..."


def test_peek_ignores_elapsed_window(clock):
	cache = _cache(clock)
	cache.put("abc", _record())
	clock.advance(60)
	start = cache.window_start

	assert cache.peek("abc") == _record()
	assert cache.window_start == start
	assert cache.get("abc") is None


def test_peek_on_disabled_cache_misses(clock):
	cache = _cache(clock, enabled=False)
	assert cache.peek("abc") is None


def test_stop_sweeper_twice_is_a_noop():
	cache = SessionCache()
	cache.configure(True, MIN_WINDOW_SECONDS)
	cache.start_sweeper()
	cache.stop_sweeper(timeout=2)
	cache.stop_sweeper(timeout=2)
	assert not cache.sweeper_running
