from inspect import FullArgSpec, getfile, getfullargspec, getsourcelines
from os.path import basename
import re
from time import time
from typing import Any, Callable

from src.platform.logging.loguru_io_config import (
    DEPTH_LINE,
    SENSITIVE_KEYWORDS,
    call_depth_var,
    chain_start_time_var,
)


MASK = '********'
MAX_CONTENT_LENGTH = 500

# Matches `keyword='value'` / `keyword="value"` / `keyword: value` inside repr strings
_SENSITIVE_PATTERN = re.compile(
    r"""(\b(?:{keys})\b)(\s*[=:]\s*)(['"]?)[^,'")}}\s]+\3""".format(
        keys='|'.join(sorted(SENSITIVE_KEYWORDS))
    )
)


def get_chain_start_time() -> float:
    if not (start_time := chain_start_time_var.get()):
        start_time = time()
        chain_start_time_var.set(start_time)
    return start_time


def fetch_layer_depth() -> str:
    return DEPTH_LINE * max(call_depth_var.get() - 1, 0)


def build_call_target_func_path(func: Callable[..., Any]) -> str:
    target = getattr(func, '__func__', func)
    try:
        lineno = getsourcelines(target)[1]
        filename = basename(getfile(target))
    except (OSError, TypeError):
        return func.__qualname__
    return f'{filename}::{func.__qualname__}:{lineno}'


def reset_call_depth() -> None:
    layer = call_depth_var.get() - 1
    call_depth_var.set(layer)
    if layer <= 0:
        call_depth_var.set(0)
        chain_start_time_var.set(0)


def normalize_args_kwargs(
    func: Callable[..., Any], *args: Any, **kwargs: Any
) -> tuple[tuple[Any, ...], dict[Any, Any]]:
    """Drop arguments the wrapped function cannot accept (FastAPI passes extras)."""
    func = getattr(func, '__wrapped__', func)
    spec: FullArgSpec = getfullargspec(func)

    if not spec.varkw:
        accepted = set(spec.args) | set(spec.kwonlyargs)
        kwargs = {k: v for k, v in kwargs.items() if k in accepted}

    if not spec.varargs:
        positional = [name for name in spec.args if name not in kwargs]
        args = args[: len(positional)]

    return args, kwargs


def mask_sensitive(data: Any) -> Any:
    text = str(data)
    masked = _SENSITIVE_PATTERN.sub(lambda m: f"{m.group(1)}{m.group(2)}'{MASK}'", text)
    return data if masked == text else masked


def should_mask_keyword(keyword: Any, value: Any) -> Any:
    return MASK if keyword in SENSITIVE_KEYWORDS else value


def truncate_content(data: Any) -> Any:
    text = str(data)
    if len(text) <= MAX_CONTENT_LENGTH:
        return data
    return f'{text[:MAX_CONTENT_LENGTH]}... <{len(text) - MAX_CONTENT_LENGTH} more chars>'
