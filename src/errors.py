# src/errors.py
"""
Error taxonomy for the enrichment pipeline.

Fatal:
  ConfigurationError, SourceUnavailable -> abort the run.

Per-record (RecordError subclasses):
  InvalidCoordinate, LookupFailed, MalformedResponse, DuplicateResult
  -> the record is skipped and the run continues.
"""


class PipelineError(Exception):
    """Base class for every error raised by the pipeline."""


class ConfigurationError(PipelineError):
    pass


class SourceUnavailable(PipelineError):
    pass


class RecordError(PipelineError):
    def __init__(self, trip_id, message=""):
        self.trip_id = trip_id
        super().__init__(message or f"trip {trip_id}")


class InvalidCoordinate(RecordError):
    def __init__(self, trip_id):
        super().__init__(trip_id, f"trip {trip_id} has a zero-valued coordinate")


class LookupFailed(RecordError):
    def __init__(self, trip_id, status: str):
        self.status = status
        super().__init__(trip_id, f"lookup for trip {trip_id} failed with status {status}")


class MalformedResponse(RecordError):
    def __init__(self, trip_id, detail: str):
        self.detail = detail
        super().__init__(trip_id, f"malformed lookup response for trip {trip_id}: {detail}")


class DuplicateResult(RecordError):
    def __init__(self, trip_id):
        super().__init__(trip_id, f"result for trip {trip_id} already stored")
