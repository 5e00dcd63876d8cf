"""Per-topic task handlers and the single-pass runner that drives them.

A delivered task moves RECEIVED -> VALIDATING and then either to
BUSINESS_ERROR_REPORTED or through COMPUTING to COMPLETED. A handler that
fails while building its output ends in FAILED, which is reported to the
engine as a technical failure so retries and incidents follow the
configured policy.
"""
