"""quick-alias — AI-assisted git aliases provisioned into your shell profile."""

__version__ = "1.0.0"

TOOL_ID = "@lvmk/quick-alias"
