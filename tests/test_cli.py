import json

import run_pipeline
from enricher import EnrichmentSummary
from errors import SourceUnavailable
from pipeline import PipelineRun


def test_missing_api_key_exits_nonzero(monkeypatch):
    monkeypatch.setenv("TRIPS_DB_DSN", "dbname=x")
    monkeypatch.delenv("ROUTING_API_KEY", raising=False)

    assert run_pipeline.main(["run"]) == 1


def test_store_outage_exits_nonzero(monkeypatch):
    monkeypatch.setenv("TRIPS_DB_DSN", "dbname=x")
    monkeypatch.setenv("ROUTING_API_KEY", "k")

    def outage(settings, id_range=None, purge=False):
        raise SourceUnavailable("down")

    monkeypatch.setattr(run_pipeline, "run_pipeline", outage)

    assert run_pipeline.main(["run"]) == 1


def test_run_prints_reports(monkeypatch, capsys):
    monkeypatch.setenv("TRIPS_DB_DSN", "dbname=x")
    monkeypatch.setenv("ROUTING_API_KEY", "k")
    seen = {}

    def fake_run(settings, id_range=None, purge=False):
        seen.update(id_range=id_range, purge=purge)
        return PipelineRun(summary=EnrichmentSummary(succeeded=1), cleaned=[], removed={}, reports={"trip_summary": []})

    monkeypatch.setattr(run_pipeline, "run_pipeline", fake_run)

    assert run_pipeline.main(["run", "--min-id", "5", "--purge"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["enrichment"]["succeeded"] == 1
    assert seen == {"id_range": (5, None), "purge": True}


def test_seed_passes_row_count(monkeypatch):
    monkeypatch.setenv("TRIPS_DB_DSN", "dbname=x")
    calls = []
    monkeypatch.setattr(run_pipeline, "load_synthetic", lambda n, clear_existing, dsn: calls.append((n, clear_existing, dsn)))

    assert run_pipeline.main(["seed", "--rows", "10", "--clear"]) == 0
    assert calls == [(10, True, "dbname=x")]
