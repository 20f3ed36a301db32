# corona_map/data_processing/errors.py
# Typed failures raised inside the data layer.

class ReportDataError(Exception):
    """Base class for report data failures."""


class LoadFailure(ReportDataError):
    """The local report cache is absent, unreadable or fails schema validation."""


class RefreshFailure(ReportDataError):
    """Downloading fresh reports from the remote feed failed."""
