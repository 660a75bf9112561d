"""Accept-Encoding negotiation."""

from typing import Optional


def accepts_gzip(accept_encoding: Optional[str]) -> bool:
    """Return True when any Accept-Encoding token is ``gzip``.

    Parameters after ``;`` are discarded without interpretation, so a
    ``q=0`` weight still counts as acceptance.
    """
    if not accept_encoding:
        return False
    for token in accept_encoding.split(","):
        algorithm, _, _ = token.strip().partition(";")
        if algorithm.lower() == "gzip":
            return True
    return False
