"""Exceptions raised by the Maoyan query pipeline."""


class MaoyanError(Exception):
    """Base class for all errors raised by this package."""


class FetchFailed(MaoyanError):
    """An outbound request to the content provider did not produce a usable body."""


class TransportFailed(FetchFailed):
    """Connection, timeout or non-success HTTP status."""


class DecodeFailed(FetchFailed):
    """Response body could not be parsed as JSON."""


class CityIndexError(MaoyanError):
    """Base class for city index lookup failures."""


class CacheEmpty(CityIndexError):
    """The city catalog has not been populated yet."""

    def __init__(self) -> None:
        super().__init__("city catalog has not been populated")


class MalformedCatalog(CityIndexError):
    """The stored city catalog does not have the expected structure."""


class NoSuchCity(CityIndexError):
    """No catalog entry matches the requested city name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"no city matches {name!r}")
        self.name = name


class MissingField(MaoyanError):
    """An expected field is absent from a provider payload."""

    def __init__(self, path: str) -> None:
        super().__init__(f"missing field {path!r}")
        self.path = path


class RequestFailed(MaoyanError):
    """
    Caller-facing failure of an orchestrated operation.

    Only ``stage`` is meant to cross the tool boundary; the underlying cause
    is chained via ``__cause__`` and logged server-side.
    """

    def __init__(self, stage: str) -> None:
        super().__init__(stage)
        self.stage = stage
