"""
infra — Host interaction: external tools, process environment, preflight.
"""

from .environment import debugger_environment
from .preflight import check_install_root
from .tools import detect_capabilities, run_tool, tool_command

__all__ = [
    "debugger_environment",
    "check_install_root",
    "detect_capabilities",
    "run_tool",
    "tool_command",
]
