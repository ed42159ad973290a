"""External API structures used as generation sources in tests."""
