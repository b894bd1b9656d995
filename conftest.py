import os.path

import pytest


@pytest.fixture
def project_root():
    return os.path.dirname(os.path.abspath(__file__))


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch, tmp_path):
    # tests must not pick up a real api key or share an offline cache
    monkeypatch.delenv('RAYGUN_APIKEY', raising=False)
    monkeypatch.setattr('raygun.conf.defaults.OFFLINE_CACHE_PATH',
                        str(tmp_path / 'raygun-offline-cache'))
