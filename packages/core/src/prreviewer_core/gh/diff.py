from __future__ import annotations


def get_commentable_lines(patch_text: str) -> set[int]:
    """
    Returns the new-file line numbers that appear on the RIGHT side of a patch.

    Added and context lines can both carry a line comment with side=RIGHT;
    removed lines exist only on the LEFT side and are excluded.
    """
    lines: set[int] = set()
    file_line: int | None = None

    for line in patch_text.splitlines():
        if line.startswith("@@"):
            try:
                new_file_range = line.split("+")[1].split(" ")[0]
                file_line = int(new_file_range.split(",")[0])
            except (IndexError, ValueError):
                file_line = None
            continue

        if file_line is None:
            continue
        if line.startswith("-"):
            continue  # Removed line - does not advance the new-file line counter
        if line.startswith("\\"):
            continue  # "\ No newline at end of file"
        lines.add(file_line)
        file_line += 1

    return lines
