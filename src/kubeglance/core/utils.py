"""Utility functions and helpers."""

import asyncio
import logging.config
import os
import structlog
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Dict, Iterable, List, Optional, TypeVar, Union

T = TypeVar('T')
K = TypeVar('K')


def setup_logging(
    config_path: Optional[Union[str, Path]] = None,
    log_level: str = "INFO",
    json_output: bool = False
) -> None:
    """Setup structured logging configuration."""
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
    else:
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def safe_get(dictionary: Dict[str, Any], key: str, default: Any = None) -> Any:
    """Safely get a value from a nested dictionary using dot notation."""
    keys = key.split('.')
    value = dictionary

    try:
        for k in keys:
            value = value[k]
        return value
    except (KeyError, TypeError):
        return default


def ensure_exec_path(extra_paths: Iterable[str], env: Optional[Dict[str, str]] = None) -> List[str]:
    """Append existing directories to PATH so exec credential plugins resolve.

    Mutates process-wide state; call once at startup. Returns the directories added.
    """
    env = os.environ if env is None else env
    existing = env.get("PATH", "")
    parts = existing.split(os.pathsep) if existing else []

    to_add = []
    for raw in extra_paths:
        path = os.path.expanduser(raw)
        if os.path.isdir(path) and path not in parts and path not in to_add:
            to_add.append(path)

    if to_add:
        env["PATH"] = os.pathsep.join(parts + to_add)
    return to_add


@dataclass(frozen=True)
class SettledResult:
    """Outcome of one branch of a settle-all gather."""

    success: bool
    value: Any = None
    error: Optional[BaseException] = None


async def gather_with_concurrency(
    coros: list,
    max_concurrency: int = 10,
    return_exceptions: bool = True
) -> list:
    """Execute coroutines with limited concurrency."""
    semaphore = asyncio.Semaphore(max_concurrency)

    async def limited_coro(coro):
        async with semaphore:
            return await coro

    limited_coros = [limited_coro(coro) for coro in coros]
    return await asyncio.gather(*limited_coros, return_exceptions=return_exceptions)


async def settle_all(
    aws: Dict[K, Awaitable[Any]],
    max_concurrency: Optional[int] = None
) -> Dict[K, SettledResult]:
    """Await every awaitable and capture each outcome without failing fast."""
    keys = list(aws.keys())
    if not keys:
        return {}

    results = await gather_with_concurrency(
        [aws[key] for key in keys],
        max_concurrency=max_concurrency or len(keys),
        return_exceptions=True
    )

    settled = {}
    for key, result in zip(keys, results):
        if isinstance(result, BaseException):
            settled[key] = SettledResult(success=False, error=result)
        else:
            settled[key] = SettledResult(success=True, value=result)
    return settled
