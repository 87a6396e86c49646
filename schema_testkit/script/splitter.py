from typing import List


def split_statements(script: str, separator: str) -> List[str]:
    """
    Split a raw script into statements on a literal separator.

    Pieces are stripped of surrounding whitespace and empty pieces are
    dropped; order is preserved. Comments are left inside whichever
    statement they fall in.
    """
    if not separator:
        raise ValueError("Statement separator must not be empty")

    statements = []
    for piece in script.split(separator):
        statement = piece.strip()
        if statement:
            statements.append(statement)
    return statements
