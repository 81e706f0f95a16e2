import json

import pytest

from redcap_client.api import ApiConnection, RedCap, RedCapProject
from redcap_client.errors import ErrorCode, RedcapClientError

API_URL = "https://redcap.example.edu/api/"
API_TOKEN = "ABCDEF0123456789ABCDEF0123456789"
SUPER_TOKEN = "1234567890ABCDEF" * 4


def test_create_project_returns_project_with_cloned_connection(fake_transport):
    redcap = RedCap(API_URL, super_token=SUPER_TOKEN, transport=fake_transport)
    fake_transport.respond(API_TOKEN + "\n")

    project = redcap.create_project({"project_title": "Trial", "purpose": 0})

    assert isinstance(project, RedCapProject)
    assert project.api_token == API_TOKEN
    assert project.connection is not redcap.connection
    sent = fake_transport.sent_params()
    assert sent["token"] == SUPER_TOKEN
    assert sent["content"] == "project"
    assert json.loads(sent["data"]) == [{"project_title": "Trial", "purpose": 0}]
    assert "odm" not in sent


def test_create_project_with_odm(fake_transport):
    redcap = RedCap(API_URL, super_token=SUPER_TOKEN, transport=fake_transport)
    fake_transport.respond(API_TOKEN)

    redcap.create_project('[{"project_title":"Trial","purpose":0}]', format="json", odm="<ODM/>")

    assert fake_transport.sent_params()["odm"] == "<ODM/>"


def test_create_project_requires_super_token(fake_transport):
    redcap = RedCap(API_URL, transport=fake_transport)

    with pytest.raises(RedcapClientError, match="super token") as exc_info:
        redcap.create_project({"project_title": "Trial", "purpose": 0})
    assert exc_info.value.code == ErrorCode.INVALID_ARGUMENT
    assert fake_transport.requests == []


def test_create_project_api_error(fake_transport):
    redcap = RedCap(API_URL, super_token=SUPER_TOKEN, transport=fake_transport)
    fake_transport.respond('{"error":"The value of the parameter \\"purpose\\" is not valid"}')

    with pytest.raises(RedcapClientError) as exc_info:
        redcap.create_project({"project_title": "Trial", "purpose": 9})
    assert exc_info.value.code == ErrorCode.REDCAP_API_ERROR


def test_super_token_must_be_64_characters():
    with pytest.raises(RedcapClientError):
        RedCap(API_URL, super_token=API_TOKEN)


def test_get_project_uses_clone(fake_transport):
    connection = ApiConnection(API_URL, transport=fake_transport)
    redcap = RedCap(connection=connection)

    project = redcap.get_project(API_TOKEN)

    assert project.connection is not connection
    assert project.connection.config == connection.config
