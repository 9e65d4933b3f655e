import pytest
from unittest.mock import Mock

import requests


@pytest.fixture
def session():
    """Stand-in for requests.Session; tests set .get / .post behaviour."""
    return Mock(spec=requests.Session)


@pytest.fixture
def dead_session():
    s = Mock(spec=requests.Session)
    s.get.side_effect = requests.ConnectionError("connection refused")
    s.post.side_effect = requests.ConnectionError("connection refused")
    return s
