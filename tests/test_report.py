"""Tests for epidemic_grid.simulation.report: counters file and text summary."""

import os

import pandas as pd

from epidemic_grid.simulation.model import EpidemicModel
from epidemic_grid.simulation.report import (
    COUNTER_COLUMNS,
    CounterLog,
    _pct,
    counters_path,
    save_counter_history,
    summary_lines,
)


class TestCounterLog:
    def test_flush_writes_header_and_rows(self, tmp_path):
        log = CounterLog()
        log.append_row(0, 1, 0, 1)
        log.append_row(1, 4, 0, 4)
        path = log.flush(str(tmp_path / "nested" / "epidemic-x.csv"))

        assert os.path.exists(path)
        with open(path) as f:
            lines = f.read().splitlines()
        assert lines[0] == "day,infected,deaths,ever_infected"
        assert lines[1:] == ["0,1,0,1", "1,4,0,4"]

    def test_empty_log_writes_header_only(self, tmp_path):
        path = CounterLog().flush(str(tmp_path / "empty.csv"))
        df = pd.read_csv(path)
        assert list(df.columns) == COUNTER_COLUMNS
        assert df.empty

    def test_counters_path(self):
        assert counters_path("run1", "out") == os.path.join("out", "epidemic-run1.csv")


class TestSaveCounterHistory:
    def test_one_row_per_day(self, tmp_path):
        model = EpidemicModel(width=8, density=1.0, rate=0.5, days=6, seed=3)
        model.run()
        path = save_counter_history(model, "test", str(tmp_path))

        assert path == str(tmp_path / "epidemic-test.csv")
        df = pd.read_csv(path)
        assert list(df.columns) == COUNTER_COLUMNS
        assert list(df["day"]) == list(range(6))
        assert df["deaths"].iloc[-1] == model.dead
        assert df["ever_infected"].iloc[-1] == model.ever_infected
        assert df["infected"].iloc[-1] == model.current_infected

    def test_partial_run(self, tmp_path):
        model = EpidemicModel(width=8, days=6, seed=3)
        model.step()
        model.step()
        df = pd.read_csv(save_counter_history(model, "partial", str(tmp_path)))
        assert len(df) == 2


class TestSummary:
    def test_outcome_lines(self):
        model = EpidemicModel(width=5, density=1.0, rate=0.0, days=3, seed=1)
        model.run()
        lines = summary_lines(model)
        assert lines[0] == "Time      : 3/3 days"
        assert lines[1] == "Infected  : 1 out of 25 (4.0%)"
        assert lines[2] == "Died      : 0 out of 25 (0.0%)"
        assert "PARAMETERS" in lines
        assert "Density      : 100% populated" in lines
        assert "Re-infection : 50.0%" in lines

    def test_interventions_left_out_when_never_introduced(self):
        model = EpidemicModel(width=5, days=3, seed=1)
        lines = summary_lines(model)
        assert "QUARANTINE" not in lines
        assert "MEDICINE" not in lines

    def test_interventions_listed_when_introduced_in_time(self):
        model = EpidemicModel(width=5, days=10, q_introduced=2, q_effectiveness=0.5,
                              med_introduced=3, med_effectiveness=0.25, seed=1)
        lines = summary_lines(model)
        assert "QUARANTINE" in lines
        assert "Quarantine introduced    : day 2" in lines
        assert "MEDICINE" in lines
        assert "Med effectiveness : 25.0% recovery" in lines

    def test_interventions_after_the_last_day_left_out(self):
        model = EpidemicModel(width=5, days=10, q_introduced=10, med_introduced=12, seed=1)
        lines = summary_lines(model)
        assert "QUARANTINE" not in lines
        assert "MEDICINE" not in lines

    def test_percentage_of_nothing(self):
        assert _pct(5, 0) == 0.0
        assert _pct(1, 4) == 25.0
