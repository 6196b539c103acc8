import os
import shutil

os.environ["MODE"] = "tests"

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from config import Config
from core.ioc import Resolve
from core.router import api_router
from main import app_factory


@pytest.fixture(scope="session")
def cfg() -> Config:
    return Resolve(Config)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return app_factory()


@pytest.fixture
def new_client(app: FastAPI):
    """Each created client has its own cookie jar, hence its own session"""

    def factory(prefix: str = api_router.prefix) -> TestClient:
        return TestClient(app, base_url=f"http://testserver{prefix}")

    return factory


@pytest.fixture
def client(new_client) -> TestClient:
    return new_client()


@pytest.fixture
def media_dir(cfg: Config):
    yield cfg.uploads.dir
    shutil.rmtree(cfg.uploads.dir, ignore_errors=True)
