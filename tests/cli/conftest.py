from types import SimpleNamespace

import pandas as pd
import pytest


@pytest.fixture
def cli_stub_state(monkeypatch, tmp_path):
    """
    Replace the heavy pipeline entry points on tools.run with call recorders.
    Shared call counters/state for assertions in CLI tests.
    """
    import tools.run as run_mod

    state = SimpleNamespace(pipeline_calls=[], explore_calls=[])

    def price_model_pipeline(model_names, final_model, data_path, cv_folds, track):
        state.pipeline_calls.append(
            dict(
                model_names=tuple(model_names),
                final_model=final_model,
                data_path=data_path,
                cv_folds=cv_folds,
                track=track,
            )
        )
        return {
            "final_model": final_model,
            "leaderboard": pd.DataFrame({"model": list(model_names), "metric": "rmse", "mean": 0.1}),
            "test_metrics": pd.DataFrame({"scale": ["log"], "metric": ["rmse"], "value": [0.1]}),
        }

    def explore_pipeline(data_path=None):
        state.explore_calls.append(data_path)
        return {"tables": [], "figures": []}

    monkeypatch.setattr(run_mod, "price_model_pipeline", price_model_pipeline, raising=True)
    monkeypatch.setattr(run_mod, "explore_pipeline", explore_pipeline, raising=True)
    monkeypatch.setattr(run_mod, "apply_global_settings", lambda: None, raising=True)
    monkeypatch.setattr(run_mod, "configure_mlflow_backend", lambda: None, raising=True)
    monkeypatch.setattr(run_mod.settings, "DATA_PATH", None)
    for k in ("DATA_PATH", "FINAL_MODEL", "CV_FOLDS"):
        monkeypatch.delenv(k, raising=False)
    return state
