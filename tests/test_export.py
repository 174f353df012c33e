"""
Tests for solution export.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def bisection_solution():
    from numsteps.solvers import get_default_registry

    return get_default_registry().solve(
        "bisection", {"function": "x^2 - 4", "lowerBound": 0, "upperBound": 3}
    )


@pytest.fixture
def jacobi_solution():
    from numsteps.solvers import get_default_registry

    return get_default_registry().solve(
        "jacobi", {"matrix": [[4, 1, 1], [1, 5, 1], [1, 1, 6]], "constants": [8, 10, 12]}
    )


class TestTextExport:
    """Tests for plain-text export."""

    def test_contains_title_and_answer(self, bisection_solution):
        from numsteps.output.exporter import SolutionExporter

        text = SolutionExporter(bisection_solution).to_text()

        assert text.startswith("Bisection Method Solution\n=====")
        assert "Answer: x = 2.00 (after 10 iterations)" in text
        assert "Step 1: Iteration 1" in text

    def test_table(self, bisection_solution):
        """Test that the iteration table is rendered."""
        from numsteps.output.exporter import SolutionExporter

        text = SolutionExporter(bisection_solution).to_text()

        assert "Iteration" in text
        assert "f(c)" in text
        assert "2.000977" in text

    def test_options(self, bisection_solution):
        """Test that steps and table can be left out."""
        from numsteps.output.exporter import ExportOptions, SolutionExporter

        options = ExportOptions(include_steps=False, include_table=False)
        text = SolutionExporter(bisection_solution, options).to_text()

        assert "Step 1:" not in text
        assert "f(c)" not in text
        assert "Answer:" in text

    def test_not_converged_note(self):
        """Test that best-effort results are flagged."""
        from numsteps.output.exporter import SolutionExporter
        from numsteps.solvers import get_default_registry

        solution = get_default_registry().solve(
            "bisection",
            {"function": "x^2 + 1", "lowerBound": 0, "upperBound": 1, "bestEffort": True},
        )
        text = SolutionExporter(solution).to_text()

        assert "(tolerance not met)" in text


class TestLatexExport:
    """Tests for LaTeX export."""

    def test_structure(self, bisection_solution):
        from numsteps.output.exporter import SolutionExporter

        latex = SolutionExporter(bisection_solution).to_latex()

        assert latex.startswith(r"\section*{Bisection Method Solution}")
        assert r"\begin{enumerate}" in latex
        assert r"\begin{tabular}{rrrrrrrr}" in latex
        assert r"\textbf{Answer:}" in latex

    def test_escapes_table_header(self):
        """Test that underscores in headers are escaped."""
        from numsteps.output.exporter import SolutionExporter
        from numsteps.solvers import get_default_registry

        solution = get_default_registry().solve(
            "newton-raphson", {"function": "x^2 - 4", "initialGuess": 3}
        )
        latex = SolutionExporter(solution).to_latex()

        assert r"x\_n" in latex


class TestJsonExport:
    """Tests for JSON export."""

    def test_root_finding(self, bisection_solution):
        from numsteps.output.exporter import SolutionExporter

        data = json.loads(SolutionExporter(bisection_solution).to_json())

        assert data["title"] == "Bisection Method Solution"
        assert data["method"] == "bisection"
        assert data["root"] == pytest.approx(2.0009765625)
        assert data["iterations"] == 10
        assert data["converged"] is True
        assert len(data["steps"]) == 10
        assert data["steps"][0]["index"] == 1
        assert data["iteration_table"][0][0] == "Iteration"
        assert "solution" not in data

    def test_iterative_snapshots(self, jacobi_solution):
        """Test that Jacobi snapshots are exported."""
        from numsteps.output.exporter import SolutionExporter

        data = SolutionExporter(jacobi_solution).to_dict()

        assert len(data["iteration_steps"]) == data["iterations"]
        assert set(data["iteration_steps"][0]) == {"iteration", "x", "y", "z", "error"}
        assert len(data["solution"]) == 3
        assert "root" not in data

    def test_without_steps(self, jacobi_solution):
        from numsteps.output.exporter import ExportOptions, SolutionExporter

        data = SolutionExporter(jacobi_solution, ExportOptions(include_steps=False)).to_dict()

        assert "steps" not in data


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
