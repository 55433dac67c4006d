# utils/crashlog.py
import os, sys, datetime, traceback

LOG_DIR_ENV = "BMSNOTES_LOG_DIR"

def log_dir() -> str:
    d = os.environ.get(LOG_DIR_ENV) or os.path.join(os.getcwd(), "logs")
    os.makedirs(d, exist_ok=True)
    return d

def _new_log_path(prefix: str = "crash") -> str:
    stamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    return os.path.join(log_dir(), f"{prefix}-{stamp}.txt")

def _write_report(path: str, header: str, exc_type, exc, tb):
    with open(path, "w", encoding="utf-8") as out:
        out.write(header + "\n")
        out.write("=" * 60 + "\n")
        out.write(f"argv: {' '.join(sys.argv)}\n")
        traceback.print_exception(exc_type, exc, tb, file=out)

def setup_crashlog():
    """Dump uncaught exceptions to logs/crash-*.txt, then defer to the default hook."""
    def _hook(exc_type, exc, tb):
        try:
            _write_report(_new_log_path("crash"), "UNCAUGHT EXCEPTION", exc_type, exc, tb)
        finally:
            sys.__excepthook__(exc_type, exc, tb)
    sys.excepthook = _hook

def log_exception(title: str, exc: BaseException) -> str:
    path = _new_log_path("error")
    _write_report(path, f"[{title}] {type(exc).__name__}: {exc}", type(exc), exc, exc.__traceback__)
    return path
