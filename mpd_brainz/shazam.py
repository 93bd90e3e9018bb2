"""Module to import a Shazam library export into ListenBrainz."""

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from mpd_brainz.errors import ParseError
from mpd_brainz.listenbrainz import ListenBrainzClient
from mpd_brainz.models import LISTENS_MAX_SIZE, Listens, ListenType

logger = logging.getLogger("shazam")

SHAZAM_SERVICE = "shazam.com"
# "Shazam Library" title line, then the column names
HEADER_ROWS = 2
DATE_FORMAT = "%Y-%m-%d"
COL_DATE, COL_TITLE, COL_ARTIST, COL_URL = 1, 2, 3, 4
READ_CHUNK_SIZE = 1000


def read_shazam_rows(
    path: str | Path, chunksize: int = READ_CHUNK_SIZE
) -> Iterator[list[str]]:
    """Stream the rows of a Shazam library CSV export.

    Lines the CSV parser cannot make sense of are logged and skipped. Missing
    trailing fields are cut off, so short rows come out short.

    Args:
        path: Path of the exported CSV file.
        chunksize: Number of lines pandas reads at once.

    Yields:
        list[str]: The fields of one row.

    """

    def _bad_line(line: list[str]) -> None:
        logger.error(f"Skipping malformed line in {path}: {line}")
        return None

    try:
        reader = pd.read_csv(
            path,
            skiprows=HEADER_ROWS,
            header=None,
            dtype=str,
            keep_default_na=False,
            engine="python",
            on_bad_lines=_bad_line,
            chunksize=chunksize,
        )
    except pd.errors.EmptyDataError:
        logger.warning(f"No listens found in {path}")
        return

    with reader:
        for chunk in reader:
            for row in chunk.itertuples(index=False, name=None):
                fields = [None if pd.isna(value) else value for value in row]
                while fields and fields[-1] is None:
                    fields.pop()
                yield ["" if value is None else value for value in fields]


def parse_date(date: str) -> int:
    """Convert a YYYY-MM-DD date to the Unix time of its midnight (UTC).

    Raises:
        ParseError: The date does not match YYYY-MM-DD.

    """
    try:
        parsed = datetime.strptime(date, DATE_FORMAT)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Parsing date: {date}: {e}") from e
    return int(parsed.replace(tzinfo=timezone.utc).timestamp())


def date_to_unix(date: str) -> int:
    """Same as parse_date but logs bad dates and returns 0 for them."""
    try:
        return parse_date(date)
    except ParseError as e:
        logger.error(str(e))
        return 0


def buffer_listens(rows: Iterator[list[str]], listens: Listens) -> bool:
    """Fill listens with rows until the batch is full or input runs out.

    Rows missing columns are logged and skipped without counting toward the
    batch size.

    Args:
        rows: Iterator over CSV rows.
        listens: Batch to fill.

    Returns:
        bool: True when the input is exhausted.

    """
    while len(listens) < LISTENS_MAX_SIZE:
        row = next(rows, None)
        if row is None:
            return True
        if len(row) <= COL_URL:
            logger.error(f"Skipping row with {len(row)} columns: {row}")
            continue
        listens.add(
            row[COL_ARTIST],
            row[COL_TITLE],
            "",
            row[COL_URL],
            SHAZAM_SERVICE,
            date_to_unix(row[COL_DATE]),
        )
    return False


def import_listens(rows: Iterable[list[str]], client: ListenBrainzClient) -> int:
    """Submit rows as import batches of at most LISTENS_MAX_SIZE listens.

    Raises:
        SubmissionError: A batch was refused, the import stops there.

    Returns:
        int: Number of listens imported.

    """
    rows = iter(rows)
    imported = 0
    finished = False
    while not finished:
        listens = Listens.new(ListenType.IMPORT)
        finished = buffer_listens(rows, listens)
        if len(listens) == 0:
            break
        client.submit(listens, ListenType.IMPORT)
        imported += len(listens)
    return imported


def import_shazam(path: str | Path, client: ListenBrainzClient) -> int:
    """Import a Shazam library export file.

    Args:
        path: Path of the CSV export.
        client: ListenBrainz client to submit with.

    Returns:
        int: Number of listens imported.

    """
    logger.info(f"Importing Shazam library: {path}")
    imported = import_listens(read_shazam_rows(path), client)
    logger.info(f"Imported {imported} listens from {path}")
    return imported
