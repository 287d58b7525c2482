# kyrisk/utils/debug.py
from kyrisk.config import _getenv_bool


def dbg(tag: str, msg: str) -> None:
    # lightweight console trace; silent unless KY_DEBUG is set
    if _getenv_bool("KY_DEBUG", False):
        print(f"[{tag}] {msg}", flush=True)
