import pytest

from best_model_service.config import ServiceConfig
from best_model_service.registry import BestScoreRegistry
from best_model_service.store import RecordStore


@pytest.fixture
def store(tmp_path):
    return RecordStore(tmp_path / "data")


@pytest.fixture
def registry(store):
    return BestScoreRegistry.from_store(store)


@pytest.fixture
def config(tmp_path):
    static = tmp_path / "static"
    static.mkdir()
    (static / "index.html").write_text("<h1>trainer</h1>")
    return ServiceConfig(data_dir=str(tmp_path / "data"), static_root=str(static))
