"""
Solution export to plain text, LaTeX, and JSON.
"""

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from ..models import Solution
from .step_generator import steps_to_text


@dataclass
class ExportOptions:
    """What to include in an export."""

    include_steps: bool = True
    include_table: bool = True


_LATEX_SPECIALS = {
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
}


def _escape(text: str) -> str:
    return "".join(_LATEX_SPECIALS.get(ch, ch) for ch in text)


def _display_math(text: str) -> str:
    """Wrap LaTeX in display math; leave plain sentences as text."""
    if "\\" in text or "=" in text or "^" in text:
        return rf"\[ {text} \]"
    return _escape(text)


class SolutionExporter:
    """
    Export a Solution in several formats.

    Usage:
        exporter = SolutionExporter(solution, ExportOptions(include_steps=False))
        print(exporter.to_text())
    """

    def __init__(self, solution: Solution, options: ExportOptions = None):
        self.solution = solution
        self.options = options or ExportOptions()

    # === Plain text ===

    def to_text(self) -> str:
        """Render as plain text for terminals."""
        sol = self.solution
        parts = [sol.title, "=" * len(sol.title)]

        if self.options.include_steps and sol.steps:
            parts.append("")
            parts.append(steps_to_text(sol.steps))

        if self.options.include_table and sol.table_header:
            parts.append("")
            parts.append(self._text_table(sol.table_header, sol.table_rows))

        parts.append("")
        parts.append(f"Answer: {sol.final_answer}")
        if not sol.converged:
            parts.append("(tolerance not met)")

        return "\n".join(parts)

    def _text_table(self, header: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        widths = [len(h) for h in header]
        for row in rows:
            widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

        def line(cells):
            return "  ".join(cell.rjust(w) for cell, w in zip(cells, widths))

        out = [line(header), "  ".join("-" * w for w in widths)]
        out.extend(line(row) for row in rows)
        return "\n".join(out)

    # === LaTeX ===

    def to_latex(self) -> str:
        """Render as a LaTeX fragment (needs amsmath)."""
        sol = self.solution
        lines = [rf"\section*{{{_escape(sol.title)}}}"]

        if self.options.include_steps and sol.steps:
            lines.append(r"\begin{enumerate}")
            for step in sol.steps:
                lines.append(rf"\item \textbf{{{_escape(step.description)}}}")
                lines.append(_display_math(step.formula))
                lines.append(_display_math(step.calculation))
                if step.result not in (None, ""):
                    for part in str(step.result).splitlines():
                        lines.append(_display_math(part))
            lines.append(r"\end{enumerate}")

        if self.options.include_table and sol.table_header:
            cols = "r" * len(sol.table_header)
            lines.append(rf"\begin{{tabular}}{{{cols}}}")
            lines.append(" & ".join(_escape(h) for h in sol.table_header) + r" \\ \hline")
            for row in sol.table_rows:
                lines.append(" & ".join(_escape(cell) for cell in row) + r" \\")
            lines.append(r"\end{tabular}")

        lines.append(rf"\textbf{{Answer:}} {_escape(sol.final_answer)}")
        return "\n".join(lines)

    # === JSON ===

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict of the solution."""
        sol = self.solution
        data: Dict[str, Any] = {
            "title": sol.title,
            "method": sol.method,
            "final_answer": sol.final_answer,
            "converged": sol.converged,
        }
        if sol.root is not None:
            data["root"] = sol.root
        if sol.solution is not None:
            data["solution"] = list(sol.solution)
        if sol.iterations is not None:
            data["iterations"] = sol.iterations
        if self.options.include_steps:
            data["steps"] = [asdict(step) for step in sol.steps]
        if self.options.include_table and sol.iteration_table is not None:
            data["iteration_table"] = [list(row) for row in sol.iteration_table]
        if sol.iteration_steps:
            data["iteration_steps"] = [asdict(snap) for snap in sol.iteration_steps]
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
