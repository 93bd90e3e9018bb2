"""Metadata normalization module."""

SEPARATOR = " - "


def normalize(artist: str, title: str, release: str) -> tuple[str, str, str]:
    """Fill in artist, title and release from a combined title field.

    Online radio streams often send everything in the title tag. There is no
    standard order for the parts, so the mapping below is inferred from what
    stations actually send:

        "Artist - Title"                   -> artist, title
        "Title - Artist - Release"         -> title, artist, release
        "Title - Artist - Release - Extra" -> same as above, extra dropped

    Args:
        artist: The artist tag, inference only runs when it is empty.
        title: The title tag.
        release: The album tag.

    Returns:
        tuple[str, str, str]: The (artist, title, release) to use.

    """
    if artist or SEPARATOR not in title:
        return artist, title, release

    parts = title.split(SEPARATOR)
    if len(parts) == 2:
        artist, title = parts
    elif len(parts) in (3, 4):
        title, artist, release = parts[0], parts[1], parts[2]

    return artist, title, release
