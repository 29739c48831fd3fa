"""Process exit codes of the leaktask CLI."""

EXIT_SUCCESS = 0
EXIT_SCAN_FAILED = 1
EXIT_INVALID_USAGE = 2
EXIT_TOOLING_ERROR = 3
