"""
Exit codes for focus-timer.

Each terminal outcome of a run maps to its own code so wrappers (shell
scripts, launch agents) can tell a user interrupt apart from a run that may
have left the network interface disabled.
"""

# Success: all cycles completed, interface enabled
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or configuration
ERROR_INVALID_ARGS = 2

# Another instance holds the single-instance lock
ERROR_ALREADY_RUNNING = 3

# Restoration failed: the interface may still be disabled
ERROR_RESTORE_FAILED = 4

# Cancelled by the user (SIGINT/SIGTERM), interface restored
CANCELLED = 130


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_ALREADY_RUNNING: "ERROR_ALREADY_RUNNING",
        ERROR_RESTORE_FAILED: "ERROR_RESTORE_FAILED",
        CANCELLED: "CANCELLED",
    }
    return code_names.get(code, f"UNKNOWN({code})")


# Operator action suggestions based on exit codes
OPERATOR_ACTIONS = {
    ERROR_GENERAL: "Check the log file for details",
    ERROR_RESTORE_FAILED: "Run 'focus-timer restore' or re-enable the interface manually",
}


def get_operator_action(code: int) -> str:
    """Get suggested follow-up for an operator based on exit code."""
    return OPERATOR_ACTIONS.get(code, "Check the log file and the network interface")
