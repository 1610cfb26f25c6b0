from __future__ import annotations

import builtins
from rich.text import Text

import arrscout.logger as arr_logger


def test_api_wait_debug_drops_when_debug_disabled(monkeypatch):
    log = arr_logger.ArrscoutLogger(debug=False)
    captured: list[tuple[str, str]] = []
    monkeypatch.setattr(log, "log", lambda msg, prefix="": captured.append((prefix, msg)))

    log.api_wait_debug("RADARR", 0.321)

    assert captured == []


def test_api_wait_debug_emits_when_debug_enabled(monkeypatch):
    log = arr_logger.ArrscoutLogger(debug=True)
    captured: list[tuple[str, str]] = []
    monkeypatch.setattr(log, "log", lambda msg, prefix="": captured.append((prefix, msg)))

    log.api_wait_debug("PROWLARR", 1.234)

    assert len(captured) == 1
    prefix, msg = captured[0]
    assert "[DEBUG]" in prefix
    assert "1.234s" in msg
    assert "PROWLARR" in msg


def test_api_wait_logs_one_time_note_per_service(monkeypatch):
    log = arr_logger.ArrscoutLogger(debug=False)
    captured: list[tuple[str, str]] = []
    monkeypatch.setattr(log, "log", lambda msg, prefix="": captured.append((prefix, msg)))

    log.api_wait("prowlarr", 1.8)
    log.api_wait("PROWLARR", 2.2)
    log.api_wait("SONARR", 2.0)

    assert captured == [
        ("[INFO] ", "Request pacing active for PROWLARR; calls to this server are spaced out."),
        ("[INFO] ", "Request pacing active for SONARR; calls to this server are spaced out."),
    ]


def test_status_prints_inline_without_newline(monkeypatch):
    captured: list[tuple[tuple[object, ...], dict]] = []

    def _fake_print(*args, **kwargs):
        captured.append((args, kwargs))

    monkeypatch.setattr(builtins, "print", _fake_print)
    log = arr_logger.ArrscoutLogger(debug=False)
    captured.clear()

    log.status("Fetching releases 2/3")

    assert len(captured) == 1
    args, kwargs = captured[0]
    assert args and str(args[0]).startswith("\rFetching releases 2/3")
    assert kwargs.get("end") == ""


def test_log_clears_inline_status_before_print(monkeypatch):
    captured_print: list[tuple[tuple[object, ...], dict]] = []
    captured_screen: list[tuple[object, dict]] = []

    def _fake_print(*args, **kwargs):
        captured_print.append((args, kwargs))

    monkeypatch.setattr(builtins, "print", _fake_print)
    log = arr_logger.ArrscoutLogger(debug=False)
    monkeypatch.setattr(log._console, "print", lambda msg, **kwargs: captured_screen.append((msg, kwargs)))
    captured_print.clear()

    log.status("In progress")
    log.info("Done")

    assert len(captured_print) == 2
    assert len(captured_screen) == 1
    clear_args, clear_kwargs = captured_print[1]
    done_text, _ = captured_screen[0]
    assert clear_args and str(clear_args[0]).startswith("\r")
    assert clear_kwargs.get("end") == ""
    assert isinstance(done_text, Text)
    assert done_text.plain == "Done"


def test_screen_text_styles_prefixes_and_tags(monkeypatch):
    log = arr_logger.ArrscoutLogger(debug=False)
    monkeypatch.setattr(log._console, "print", lambda *_args, **_kwargs: None)

    warning = log._screen_text("[WARNING] [fetcher] Release fetch failed for sonarr: boom")
    error = log._screen_text("[ERROR] RADARR not responding after 3 attempts. Giving up.")
    plain = log._screen_text("Nothing to style here")

    assert any(span.style == "yellow" for span in warning.spans)
    assert any(span.style == "grey50" for span in warning.spans)
    assert any(span.style == "red" for span in error.spans)
    assert plain.spans == []


def test_screen_text_preserves_literal_brackets(monkeypatch):
    log = arr_logger.ArrscoutLogger(debug=False)
    monkeypatch.setattr(log._console, "print", lambda *_args, **_kwargs: None)

    line = "[INFO] [bold]literal text should stay literal[/bold]"
    rendered = log._screen_text(line)

    assert isinstance(rendered, Text)
    assert rendered.plain == line


def test_api_response_truncates_large_payloads(monkeypatch):
    log = arr_logger.ArrscoutLogger(debug=True)
    captured: list[str] = []
    monkeypatch.setattr(log, "log", lambda msg, prefix="": captured.append(msg))

    log.api_response(200, [{"title": "x" * 100}] * 100, 12.0)

    assert captured[0].startswith("API Response (12ms): Status 200")
    assert captured[1].endswith("... (truncated)")


def test_log_writes_plain_text_to_file(tmp_path, monkeypatch):
    out = tmp_path / "logs" / "arrscout.log"
    log = arr_logger.ArrscoutLogger(log_file=out, debug=False)
    monkeypatch.setattr(log._console, "print", lambda *_args, **_kwargs: None)

    log.warning("[ranking] literal bracketed message")
    log.close()

    text = out.read_text(encoding="utf-8")
    assert "[WARNING] [ranking] literal bracketed message" in text
    assert "Ended session" in text


def test_module_status_helpers_use_global_logger(monkeypatch):
    log = arr_logger.ArrscoutLogger(debug=False)
    calls: list[str] = []
    monkeypatch.setattr(log, "status", lambda msg: calls.append(msg))
    monkeypatch.setattr(log, "_clear_status", lambda: calls.append("<clear>"))
    monkeypatch.setattr(arr_logger, "_logger", log)

    arr_logger.status("Fetching releases 1/2")
    arr_logger.clear_status()

    assert calls == ["Fetching releases 1/2", "<clear>"]
