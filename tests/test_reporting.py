"""Tests for generation reports and console reporters."""

import io

import pytest
from rich.console import Console

from evosolve.core.population import Candidate
from evosolve.orchestrator import reporting
from evosolve.orchestrator.reporting import (
    GenerationReport,
    HistoryReporter,
    RichReporter,
    print_explanation,
)
from evosolve.utils.logging import set_verbosity


def make_report(lineage=None, generation=1):
    return GenerationReport(
        generation=generation,
        population_size=4,
        sample_size=2,
        leaders=[
            Candidate(id=7, x=5.0, y=5.0, z=0.0, fitness=9999.0, parent_a=1, parent_b=0),
            Candidate(id=6, x=5.0, y=4.0, z=0.0, fitness=1.0, parent_a=0, parent_b=0),
        ],
        survivor_means=(5.0, 4.5, 0.0),
        best_fitness=9999.0,
        mean_fitness=2500.0,
        best=Candidate(id=7, x=5.0, y=5.0, z=0.0, fitness=9999.0, parent_a=1, parent_b=0),
        lineage=lineage,
    )


@pytest.fixture
def capture():
    return Console(file=io.StringIO(), width=120, safe_box=True)


@pytest.fixture
def normal():
    set_verbosity("normal")


class TestGenerationReport:
    def test_best(self):
        assert make_report().best.id == 7

    def test_best_independent_of_leaders(self):
        report = make_report()
        report.leaders = []
        assert report.best.fitness == 9999.0

    def test_to_dict(self):
        data = make_report(lineage={8: (7, 6)}).to_dict()
        assert data["generation"] == 1
        assert data["best_fitness"] == 9999.0
        assert data["mean_y"] == 4.5
        assert "lineage" not in data


class TestHistoryReporter:
    def test_keeps_reports(self):
        history = HistoryReporter()
        assert history.last is None

        history.report(make_report(generation=1))
        history.report(make_report(generation=2))

        assert len(history.reports) == 2
        assert history.last.generation == 2


class TestRichReporter:
    def test_leaderboard(self, capture, normal):
        RichReporter(console=capture).report(make_report())
        output = capture.file.getvalue()

        assert "Generation 1" in output
        assert "9999" in output
        assert "Survivor means" in output
        assert "x=5.000000" in output
        assert "Lineage" not in output

    def test_lineage_table(self, capture, normal):
        RichReporter(console=capture).report(make_report(lineage={8: (7, 6), 9: (6, 6)}))
        output = capture.file.getvalue()

        assert "Lineage" in output
        assert "parent a (x)" in output

    def test_lineage_rows_truncated(self, capture, normal):
        lineage = {child: (0, 1) for child in range(10, 40)}
        RichReporter(console=capture, lineage_rows=5).report(make_report(lineage=lineage))

        assert "25 more entries" in capture.file.getvalue()

    def test_lineage_hidden(self, capture, normal):
        RichReporter(console=capture, show_lineage=False).report(make_report(lineage={8: (7, 6)}))
        assert "Lineage" not in capture.file.getvalue()

    def test_silent(self, capture):
        set_verbosity("silent")
        RichReporter(console=capture).report(make_report(lineage={8: (7, 6)}))
        assert capture.file.getvalue() == ""

    def test_pace_after_lineage(self, capture, normal, monkeypatch):
        pauses = []
        monkeypatch.setattr(reporting.time, "sleep", pauses.append)
        reporter = RichReporter(console=capture, pace=0.5)

        reporter.report(make_report())
        assert pauses == []

        reporter.report(make_report(lineage={8: (7, 6)}))
        assert pauses == [0.5]


class TestExplanation:
    def test_printed(self, capture, normal):
        print_explanation(capture)
        output = capture.file.getvalue()
        assert "Parameters" in output
        assert "200th power" in output

    def test_silent(self, capture):
        print_explanation(capture)
        assert capture.file.getvalue() == ""
