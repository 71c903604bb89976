"""Exception hierarchy.

Per-candidate provider problems (throttling, HTTP errors, malformed payloads) are raised inside the
quote client and absorbed there; the rest reach the caller.
"""


class TourneyFlightsError(Exception):
    pass


class NoCredentialsError(TourneyFlightsError):
    pass


class InvalidCredentialsError(TourneyFlightsError):
    pass


class InvalidSessionConfigError(TourneyFlightsError):
    pass


class SessionNotFoundError(TourneyFlightsError):
    pass


class ProviderThrottledError(TourneyFlightsError):
    pass


class ProviderError(TourneyFlightsError):
    pass


class QuoteParseError(TourneyFlightsError):
    pass


class InvalidSearchError(TourneyFlightsError):
    pass


class TournamentSourceError(TourneyFlightsError):
    pass
