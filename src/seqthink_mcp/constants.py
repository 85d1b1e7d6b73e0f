"""Project-wide constants for the sequential thinking server."""

SERVER_NAME = "enhanced-sequential-thinking-server"
SERVER_VERSION = "0.3.0"
TOOL_NAME = "enhancedsequentialthinking"

SERVER_INSTRUCTIONS = (
    "Record structured reasoning steps with the enhancedsequentialthinking tool. "
    "Label each step with its Cognitive State Model state in branchId "
    "(for example 'state: DECOMPOSE' or 'state: EXPAND(database)')."
)
