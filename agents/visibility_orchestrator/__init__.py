"""
Visibility Orchestrator

Selects and runs one of the two analysis workflows behind a common
interface.
"""

from agents.visibility_orchestrator.workflows import (
    AnalysisWorkflow,
    MultiCallWorkflow,
    SingleCallWorkflow,
    get_workflow
)


__all__ = ["AnalysisWorkflow", "MultiCallWorkflow", "SingleCallWorkflow", "get_workflow"]
