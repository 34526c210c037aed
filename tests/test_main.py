from unittest.mock import patch

from best_model_service.__main__ import main


def test_main_runs_uvicorn_with_cli_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("MODEL_STATIC_ROOT", str(tmp_path))
    data = tmp_path / "models"
    with patch("best_model_service.__main__.uvicorn.run") as run, \
            patch("best_model_service.__main__.setup_logging") as setup_logging:
        main(["--port", "4321", "--data-dir", str(data), "--log-level", "warning"])

    app = run.call_args[0][0]
    assert run.call_args.kwargs["port"] == 4321
    assert app.state.config.data_dir == str(data)
    assert app.state.config.log_level == "WARNING"
    assert app.state.registry.current().score == 0
    assert data.is_dir()
    setup_logging.assert_called_once_with("WARNING")
