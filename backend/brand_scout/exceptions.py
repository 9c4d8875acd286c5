class BrandScoutError(Exception):
    """Base class for errors raised by the analysis pipeline."""


class RenderError(BrandScoutError):
    """The page could not be rendered (unreachable host, navigation failure)."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url


class NavigationTimeout(RenderError):
    def __init__(self, url: str, timeout_ms: int):
        super().__init__(url, f"Navigation timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class RenderSessionUnavailable(RenderError):
    """A browser session could not be opened at all."""


class SummaryParseError(BrandScoutError):
    """The text-generation reply did not contain a usable analysis object."""


class InvalidClientInput(BrandScoutError):
    pass
