"""
Finds the target URL in a log line.
"""

# Characters dropped from the end of a token: quoting, closing brackets and
# sentence punctuation that log formatters put right after a URL.
TRAILING_PUNCTUATION = "\"')]}.,;:|"


def _trim_trailing(token: str) -> str:
    """Strip trailing punctuation and whitespace."""
    return token.rstrip(TRAILING_PUNCTUATION + " \t\r\n\f\v")


def normalize_value(token: str) -> str:
    """
    Normalize a raw token into its canonical form.

    Drops trailing punctuation, the fragment, and trailing slashes, so
    ``https://ex.trycloudflare.com/#top.`` becomes
    ``https://ex.trycloudflare.com``.
    """
    value = _trim_trailing(token)
    value = value.split('#', 1)[0]
    value = _trim_trailing(value)
    return value.rstrip('/')


class PatternExtractor:
    """
    Extracts the first qualifying URL from a line.

    Config:
        prefix: Token that starts a candidate (default: "https://")
        match: Substring a normalized candidate must contain
            (default: "trycloudflare.com")
        max_value_length: Longest token considered, in characters
    """

    def __init__(
        self,
        prefix: str = "https://",
        match: str = "trycloudflare.com",
        max_value_length: int = 1024
    ) -> None:
        if not prefix:
            raise ValueError("prefix must not be empty")
        self.prefix = prefix
        self.match = match
        self.max_value_length = max_value_length

    def _token_at(self, line: str, start: int) -> str:
        """Maximal run of non-whitespace characters starting at ``start``."""
        end = start
        limit = min(len(line), start + self.max_value_length)
        while end < limit and not line[end].isspace():
            end += 1
        return line[start:end]

    def extract(self, line: str) -> str | None:
        """
        Return the first normalized occurrence containing ``match``.

        Args:
            line: A raw log line

        Returns:
            The canonical value, or None if the line holds no qualifying URL
        """
        start = line.find(self.prefix)
        while start != -1:
            value = normalize_value(self._token_at(line, start))
            if self.match in value:
                return value
            start = line.find(self.prefix, start + 1)
        return None
