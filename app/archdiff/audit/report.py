"""Report output for divergence records.

One line per record, sorted by path::

    ? /etc/local-only.conf
    B /etc/pacman.conf
    R /etc/ssh/sshd_config
    D /usr/share/doc/removed.txt

Lines are written as bytes so that file names which are not valid in the
locale encoding are reproduced exactly.
"""

import os
from collections.abc import Iterable
from typing import BinaryIO

from archdiff.audit.models import Divergence


def sort_divergences(records: Iterable[Divergence]) -> list[Divergence]:
    """Sort records by path in byte order.

    The sort is stable, so records sharing a path keep their input order.

    Args:
        records: Divergence records in any order.

    Returns:
        New list sorted by the path's filesystem encoding.
    """
    return sorted(records, key=lambda r: os.fsencode(r.path))


def format_line(record: Divergence, root: str) -> str:
    """Format a record as a report line.

    Args:
        record: Divergence to format.
        root: Live root, ending with a separator.

    Returns:
        ``"<TAG> <root><path>\\n"``.
    """
    return f"{record.kind.value} {root}{record.path}\n"


def write_report(records: Iterable[Divergence], root: str, stream: BinaryIO) -> int:
    """Sort records and write the report.

    Args:
        records: Divergence records in any order.
        root: Live root, ending with a separator.
        stream: Binary output stream.

    Returns:
        Number of lines written.
    """
    count = 0
    for record in sort_divergences(records):
        stream.write(os.fsencode(format_line(record, root)))
        count += 1
    stream.flush()
    return count
