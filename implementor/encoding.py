from typing import Iterable, TextIO


def _escape_char(ch: str) -> str:
    if ord(ch) < 128:
        return ch
    # code points above U+FFFF become a surrogate pair, one escape per unit
    units = ch.encode("utf-16-be")
    return "".join(
        "\\u%04X" % int.from_bytes(units[i:i + 2], "big") for i in range(0, len(units), 2)
    )


def escape_non_ascii(text: str) -> str:
    """
    Replace every character outside 7-bit ASCII with its \\uXXXX escape.
    """
    if text.isascii():
        return text
    return "".join(_escape_char(ch) for ch in text)


class UnicodeEscapingWriter:
    """
    Text writer wrapper: everything written through it reaches the
    underlying stream as pure ASCII.
    """

    def __init__(self, out: TextIO) -> None:
        self._out = out

    def write(self, text: str) -> int:
        return self._out.write(escape_non_ascii(text))

    def writelines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        self._out.flush()

    def close(self) -> None:
        self._out.close()

    def __enter__(self) -> "UnicodeEscapingWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
