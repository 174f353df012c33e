"""Output layer: step recording and export."""

from .step_generator import StepRecorder, create_step
from .exporter import SolutionExporter, ExportOptions

__all__ = ["StepRecorder", "create_step", "SolutionExporter", "ExportOptions"]
