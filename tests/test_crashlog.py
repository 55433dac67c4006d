import sys

from utils import crashlog


def test_log_exception_writes_report(tmp_path, monkeypatch):

    monkeypatch.setenv(crashlog.LOG_DIR_ENV, str(tmp_path))

    try:
        raise ValueError("bad chart")
    except ValueError as e:
        path = crashlog.log_exception("load", e)

    text = open(path, encoding="utf-8").read()
    assert "[load] ValueError: bad chart" in text
    assert "Traceback" in text


def test_setup_crashlog_hook(tmp_path, monkeypatch):

    """The installed hook writes a crash file and still calls the default hook."""

    seen = []
    monkeypatch.setenv(crashlog.LOG_DIR_ENV, str(tmp_path))
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(sys, "__excepthook__", lambda *args: seen.append(args[0]))

    crashlog.setup_crashlog()
    try:
        raise RuntimeError("boom")
    except RuntimeError as e:
        sys.excepthook(type(e), e, e.__traceback__)

    assert seen == [RuntimeError]
    reports = list(tmp_path.glob("crash-*.txt"))
    assert len(reports) == 1
    assert "RuntimeError: boom" in reports[0].read_text(encoding="utf-8")
