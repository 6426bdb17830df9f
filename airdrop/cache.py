import json
import logging
from functools import wraps
from pathlib import Path

import toml

logger = logging.getLogger(__name__)

CODECS = {".toml": toml, ".json": json}
CODEC_ARGS = {".json": {"indent": 2}}


def cached(path):
    """
    Stores a step's result in ``path`` and serves it from there afterwards.

    The decorated function gains ``invalidate()`` to drop the file, and a
    ``refresh=True`` keyword forces recomputation.
    """
    path = Path(path)
    try:
        codec = CODECS[path.suffix]
    except KeyError:
        raise ValueError(f"unsupported cache format: {path.suffix!r}") from None
    codec_args = CODEC_ARGS.get(path.suffix, {})

    def decorator(func):
        @wraps(func)
        def wrapper(*args, refresh=False, **kwargs):
            if path.exists() and not refresh:
                logger.info("load from cache %s", path)
                return codec.loads(path.read_text())
            result = func(*args, **kwargs)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(codec.dumps(result, **codec_args))
            logger.info("write to cache %s", path)
            return result

        def invalidate():
            if path.exists():
                path.unlink()
                logger.info("invalidated cache %s", path)

        wrapper.invalidate = invalidate
        wrapper.cache_path = path
        return wrapper

    return decorator
