import random


def compute_backoff_seconds(attempt: int, base: int = 10, cap: int = 900, retry_after: int | None = None) -> int:
    # exponential backoff with jitter; a server-provided Retry-After wins if longer
    exp = min(cap, base * (2 ** max(0, attempt - 1)))
    jitter = random.randint(0, min(30, exp // 3))
    delay = exp + jitter
    if retry_after is not None:
        delay = max(delay, min(cap, retry_after))
    return delay
