import pytest
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from liftengine.app import app

TEST_JWT_SECRET = "test-secret-key-for-liftengine-route-tests"

@pytest.fixture()
def client():
    app.config.update(TESTING=True, JWT_SECRET_KEY=TEST_JWT_SECRET)
    with app.test_client() as client:
        yield client
